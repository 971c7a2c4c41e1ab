import pytest

from ctrseek.cipher.counter import (
    add_to_counter,
    block_position,
    counter_for_block,
    counter_range_ok,
    increment_counter,
)
from ctrseek.errors import CounterOverflowError


def test_increment_simple():
    c = bytearray(b"\x00\x00\x01")
    assert increment_counter(c) is False
    assert c == bytearray(b"\x00\x00\x02")


def test_increment_carries_from_last_byte():
    c = bytearray(b"\x00\x01\xff")
    increment_counter(c)
    assert c == bytearray(b"\x00\x02\x00")


def test_increment_stops_at_first_non_wrapping_byte():
    c = bytearray(b"\x07\xfe\xff\xff")
    increment_counter(c)
    assert c == bytearray(b"\x07\xff\x00\x00")


def test_increment_wraps_all_ff_to_zero():
    c = bytearray(b"\xff" * 16)
    assert increment_counter(c) is True
    assert c == bytearray(16)


@pytest.mark.parametrize("start,n", [
    (0, 0),
    (0, 1),
    (0x00ff, 1),
    (0x1234, 0xedcb),
    (0x01ff_ff00, 0x1_0000_0100),
    (0xdead_beef, 12345678),
])
def test_add_matches_integer_arithmetic(start, n):
    width = 8
    c = bytearray(start.to_bytes(width, "big"))
    overflow = add_to_counter(c, n)
    assert int.from_bytes(c, "big") == (start + n) % 2 ** (8 * width)
    assert overflow is (start + n >= 2 ** (8 * width))


def test_add_wraps_silently():
    c = bytearray(b"\xff\xff")
    assert add_to_counter(c, 3) is True
    assert c == bytearray(b"\x00\x02")


def test_add_larger_than_width_wraps():
    c = bytearray(b"\x00\x01")
    assert add_to_counter(c, 0x1_0000) is True
    assert c == bytearray(b"\x00\x01")


def test_add_rejects_negative():
    with pytest.raises(ValueError):
        add_to_counter(bytearray(4), -1)


def test_add_equals_repeated_increment():
    a = bytearray(b"\x00\xfa\xff")
    b = bytearray(a)
    add_to_counter(a, 300)
    for _ in range(300):
        increment_counter(b)
    assert a == b


def test_counter_for_block_does_not_mutate_initial_counter():
    iv = bytes(range(16))
    c = counter_for_block(iv, 5)
    assert iv == bytes(range(16))
    assert c[-1] == 15 + 5
    assert c[:-1] == bytearray(range(15))


def test_counter_for_block_strict_overflow():
    with pytest.raises(CounterOverflowError):
        counter_for_block(b"\xff\xff", 1, strict=True)
    assert counter_for_block(b"\xff\xff", 1) == bytearray(2)


def test_counter_range_ok():
    assert counter_range_ok(b"\xff\xfe", 1)
    assert not counter_range_ok(b"\xff\xfe", 2)


@pytest.mark.parametrize("offset,expected", [
    (0, (0, 0)),
    (15, (0, 15)),
    (16, (1, 0)),
    (17, (1, 1)),
    (257, (16, 1)),
])
def test_block_position(offset, expected):
    assert block_position(offset, 16) == expected


def test_block_position_negative():
    with pytest.raises(ValueError):
        block_position(-1, 16)
