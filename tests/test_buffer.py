import pytest

from ucnscan.buffer import DEFAULT_GROWTH, ReadBuffer


def _is_block(capacity: int, growth: int) -> bool:
    if capacity < growth:
        return False
    while capacity > growth:
        if capacity % 2:
            return False
        capacity //= 2
    return capacity == growth


def test_new_buffer_is_empty():
    buf = ReadBuffer()
    assert buf.is_empty()
    assert len(buf) == 0
    assert buf.capacity == 0


def test_default_growth_matches_source():
    assert ReadBuffer().growth == DEFAULT_GROWTH == 4096


def test_append_then_read_all_round_trip():
    buf = ReadBuffer()
    buf.append(b"<5,5.000,10.00>")
    buf.append(b"more")
    assert len(buf) == len(b"<5,5.000,10.00>more")
    assert buf.read_all() == b"<5,5.000,10.00>more"
    assert buf.is_empty()


def test_read_partial_and_over_length():
    buf = ReadBuffer()
    buf.append(b"abcdef")
    assert buf.read(1) == b"a"
    assert buf.read(2) == b"bc"
    assert buf.read(100) == b"def"
    assert buf.read(5) == b""


def test_read_negative_size_rejected():
    buf = ReadBuffer()
    buf.append(b"x")
    with pytest.raises(ValueError):
        buf.read(-1)


def test_read_line_stops_after_newline():
    buf = ReadBuffer()
    buf.append(b"first\nsecond\n")
    assert buf.can_read_line()
    assert buf.read_line(100) == b"first\n"
    assert buf.read_line(100) == b"second\n"
    assert not buf.can_read_line()


def test_read_line_limited_by_size():
    buf = ReadBuffer()
    buf.append(b"abcdef\n")
    assert buf.read_line(3) == b"abc"
    assert buf.read_all() == b"def\n"


def test_read_line_without_newline_returns_available():
    buf = ReadBuffer()
    buf.append(b"partial")
    assert not buf.can_read_line()
    assert buf.read_line(50) == b"partial"
    assert buf.is_empty()


def test_chop_removes_from_end():
    buf = ReadBuffer()
    buf.append(b"hello world")
    buf.chop(6)
    assert buf.read_all() == b"hello"


def test_chop_more_than_length_clears():
    buf = ReadBuffer()
    buf.append(b"abc")
    buf.chop(10)
    assert buf.is_empty()


def test_clear_keeps_capacity():
    buf = ReadBuffer(growth=16)
    buf.append(b"x" * 10)
    cap = buf.capacity
    buf.clear()
    assert len(buf) == 0
    assert buf.capacity == cap


@pytest.mark.parametrize("sizes", [[1], [16], [17], [5, 5, 5, 5], [100, 3, 200]])
def test_capacity_is_doubled_block_holding_data(sizes):
    buf = ReadBuffer(growth=16)
    for size in sizes:
        buf.append(b"z" * size)
        assert buf.capacity >= len(buf)
        assert _is_block(buf.capacity, 16)


def test_squeeze_shrinks_back_to_growth():
    buf = ReadBuffer(growth=16)
    buf.append(b"y" * 100)
    big = buf.capacity
    buf.read(95)
    buf.squeeze()
    assert buf.capacity == 16
    assert buf.capacity < big
    assert buf.read_all() == b"yyyyy"


def test_squeeze_keeps_room_for_pending_data():
    buf = ReadBuffer(growth=8)
    buf.append(b"q" * 40)
    buf.squeeze()
    assert buf.capacity >= 40
    assert _is_block(buf.capacity, 8)
    assert len(buf) == 40


def test_invalid_growth_rejected():
    with pytest.raises(ValueError):
        ReadBuffer(growth=0)