"""Coloured one-line summaries of a request and its reply."""

import sys
from datetime import timedelta
from typing import Any

from egokit.xcolor import blue, green, red, yellow


def _millis(cost: timedelta) -> str:
    micros = cost // timedelta(microseconds=1)
    text = repr(micros / 1000)
    return text[:-2] if text.endswith(".0") else text


def _caller(skip: int) -> str:
    try:
        frame = sys._getframe(skip + 1)
    except ValueError:
        return ":0"
    return f"{frame.f_code.co_filename}:{frame.f_lineno}"


def make_req_res_info(comp_name: str, addr: str, cost: timedelta, req: Any, reply: Any) -> str:
    """Describe a successful call: component, address, cost, request and reply."""
    return (
        f"{green(comp_name)} {green(addr)} {yellow(f'[{_millis(cost)}ms]')} "
        f"{blue(str(req))} => {blue(str(reply))}\n"
    )


def make_req_res_error(comp_name: str, addr: str, cost: timedelta, req: str, err: str) -> str:
    """Describe a failed call: component, address, cost, request and error."""
    return (
        f"{red(comp_name)} {red(addr)} {yellow(f'[{_millis(cost)}ms]')} "
        f"{blue(str(req))} => {red(err)}\n"
    )


def make_req_res_info_v2(
    caller_skip: int, comp_name: str, addr: str, cost: timedelta, req: Any, reply: Any
) -> str:
    """Like :func:`make_req_res_info`, prefixed with the caller's file and line.

    ``caller_skip`` 0 names this function, 1 its caller.
    """
    return (
        f"{green(_caller(caller_skip))} {green(comp_name)} {green(addr)} "
        f"{yellow(f'[{_millis(cost)}ms]')} {blue(str(req))} => {blue(str(reply))} \n"
    )


def make_req_res_error_v2(
    caller_skip: int, comp_name: str, addr: str, cost: timedelta, req: str, err: str
) -> str:
    """Like :func:`make_req_res_error`, prefixed with the caller's file and line."""
    return (
        f"{green(_caller(caller_skip))} {red(comp_name)} {red(addr)} "
        f"{yellow(f'[{_millis(cost)}ms]')} {blue(str(req))} => {red(err)} \n"
    )