import inspect
from datetime import timedelta

from egokit.xcolor import blue, green, red, yellow
from egokit.xdebug import (
    make_req_res_error,
    make_req_res_error_v2,
    make_req_res_info,
    make_req_res_info_v2,
)


def test_info_layout():
    out = make_req_res_info("comp", "addr", timedelta(milliseconds=2), "req", "reply")
    assert out == (
        green("comp") + " " + green("addr") + " " + yellow("[2ms]") + " "
        + blue("req") + " => " + blue("reply") + "\n"
    )


def test_error_layout():
    out = make_req_res_error("comp", "addr", timedelta(microseconds=1500), "req", "boom")
    assert out == (
        red("comp") + " " + red("addr") + " " + yellow("[1.5ms]") + " "
        + blue("req") + " => " + red("boom") + "\n"
    )


def test_info_v2_names_caller():
    line = inspect.currentframe().f_lineno + 1
    out = make_req_res_info_v2(1, "comp", "addr", timedelta(0), {"a": 1}, None)
    assert out.startswith(green(f"{__file__}:{line}"))
    assert out.endswith(blue("None") + " \n")
    assert blue(str({"a": 1})) in out


def test_error_v2_names_caller():
    out = make_req_res_error_v2(1, "comp", "addr", timedelta(0), "req", "boom")
    assert __file__ in out
    assert out.endswith(red("boom") + " \n")


def test_v2_too_deep_has_empty_location():
    out = make_req_res_info_v2(10**6, "comp", "addr", timedelta(0), "req", "reply")
    assert out.startswith(green(":0") + " ")