from egokit.xcolor import blue, green, red, yellow


def test_yellow():
    out = yellow(bytes([0x30]).decode())
    assert out.encode() == bytes([0x1B, 0x5B, 0x33, 0x33, 0x6D, 0x30, 0x1B, 0x5B, 0x30, 0x6D])


def test_red():
    out = red("0")
    assert out.encode() == bytes([0x1B, 0x5B, 0x33, 0x31, 0x6D, 0x30, 0x1B, 0x5B, 0x30, 0x6D])


def test_blue():
    out = blue("0")
    assert out.encode() == bytes([0x1B, 0x5B, 0x33, 0x34, 0x6D, 0x30, 0x1B, 0x5B, 0x30, 0x6D])


def test_green():
    out = green("0")
    assert out.encode() == bytes([0x1B, 0x5B, 0x33, 0x32, 0x6D, 0x30, 0x1B, 0x5B, 0x30, 0x6D])