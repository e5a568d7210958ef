import pytest

from octavox.oscargs import OscArgument, OscArgumentError, OscType
from octavox.timetag import (
    IMMEDIATE,
    FileLine,
    TimeTag,
    format_dump_line,
    group_bundles,
    parse_line,
    parse_timetag,
)


def test_add_carries_fraction_overflow():
    result = TimeTag(1, 0xFFFFFFFF).add(TimeTag(0, 1))
    assert result == TimeTag(2, 0)


@pytest.mark.parametrize(
    "a, b",
    [
        (TimeTag(10, 5), TimeTag(3, 7)),
        (TimeTag(0, 0), TimeTag(1, 0xFFFFFFFF)),
        (TimeTag(0xFFFFFFFF, 0x80000000), TimeTag(0x80000000, 0x80000001)),
    ],
)
def test_subtract_then_add_round_trip(a, b):
    assert a.subtract(b).add(b) == a


def test_diff_is_antisymmetric():
    a, b = TimeTag(20, 0x40000000), TimeTag(5, 0xC0000000)
    assert a.diff(b) == -b.diff(a)
    assert a.diff(a) == 0.0


def test_diff_matches_float_difference():
    a, b = TimeTag(7, 0x20000000), TimeTag(3, 0x10000000)
    assert a.diff(b) == pytest.approx(a.to_float() - b.to_float())


def test_to_float_half_second():
    assert TimeTag(3, 0x80000000).to_float() == 3.5


def test_scale_by_one_is_identity():
    tag = TimeTag(12, 0x80000000)
    assert tag.scale(1.0) == tag


def test_scale_halves_duration():
    tag = TimeTag(10, 0)
    assert tag.scale(0.5).to_float() == pytest.approx(tag.to_float() / 2)


def test_out_of_range_field_rejected():
    with pytest.raises(ValueError):
        TimeTag(2**32, 0)
    with pytest.raises(ValueError):
        TimeTag(0, -1)


def test_immediate_flag():
    assert IMMEDIATE.is_immediate
    assert not TimeTag(0, 0).is_immediate


def test_parse_timetag_hex_fields():
    assert parse_timetag("0000000a.80000000") == TimeTag(0xA, 0x80000000)


def test_parse_timetag_missing_fraction():
    assert parse_timetag("ff") == TimeTag(0xFF, 0)


def test_parse_timetag_garbage_is_zero():
    assert parse_timetag("zz.yy") == TimeTag(0, 0)


def test_parse_line_immediate_message():
    entry = parse_line("/foo if 1 2.5\n")
    assert entry == FileLine(None, "/foo", "if", ("1", "2.5"))


def test_parse_line_with_timetag():
    entry = parse_line("00000001.00000002 /bar s hello\r\n")
    assert entry == FileLine(TimeTag(1, 2), "/bar", "s", ("hello",))


def test_parse_line_blank_and_timetag_only():
    assert parse_line("   \n") is None
    assert parse_line("00000001.00000000\n").path is None


def test_group_immediate_lines_share_bundle():
    bundles = list(group_bundles(["/a i 1", "/b T"], start=TimeTag(100, 0)))
    assert len(bundles) == 1
    when, messages = bundles[0]
    assert when == IMMEDIATE
    assert [path for path, _ in messages] == ["/a", "/b"]
    assert messages[0][1] == [OscArgument(OscType.INT32, 1)]


def test_group_timed_lines_start_at_origin():
    start = TimeTag(100, 0)
    lines = [
        "00000010.00000000 /a i 1",
        "00000010.00000000 /b s \"hi\"",
        "00000011.00000000 /c",
    ]
    bundles = list(group_bundles(lines, start=start))
    assert [len(messages) for _, messages in bundles] == [2, 1]
    assert bundles[0][0] == start
    assert bundles[1][0].diff(bundles[0][0]) == 1.0
    assert bundles[0][1][1][1] == [OscArgument(OscType.STRING, "hi")]


def test_group_speed_compresses_time():
    lines = ["00000010.00000000 /a", "00000012.00000000 /b"]
    first, second = group_bundles(lines, start=TimeTag(50, 0), speed=2.0)
    assert second[0].diff(first[0]) == pytest.approx(1.0)


def test_group_zero_speed_rejected():
    with pytest.raises(ValueError):
        list(group_bundles(["/a"], start=TimeTag(1, 0), speed=0))


def test_group_bad_argument_raises():
    with pytest.raises(OscArgumentError):
        list(group_bundles(["/a i notanumber"], start=TimeTag(1, 0)))


def test_format_dump_line_int():
    line = format_dump_line(TimeTag(1, 2), "/a", "i", [OscArgument(OscType.INT32, 5)])
    assert line == "00000001.00000002 /a i 5"


def test_format_dump_line_no_args():
    assert format_dump_line(TimeTag(0xABC, 0), "/x", "", []) == "00000abc.00000000 /x "


def test_format_dump_line_immediate_uses_now():
    line = format_dump_line(IMMEDIATE, "/n", "N", [OscArgument(OscType.NIL, None)])
    stamp = line.split(" ")[0]
    assert parse_timetag(stamp) != IMMEDIATE
    assert line.endswith(" /n N Nil")