import math

import pytest

from octavox.oscargs import (
    INT32_MAX,
    INT32_MIN,
    INT64_MAX,
    INT64_MIN,
    OscArgument,
    OscArgumentError,
    OscType,
    build_arguments,
)


def test_usage_example():
    args = build_arguments("iTfs", ["1", "3.14", "hello"])
    assert [a.type for a in args] == [
        OscType.INT32,
        OscType.TRUE,
        OscType.FLOAT,
        OscType.STRING,
    ]
    assert args[0].value == 1
    assert args[1].value is True
    assert args[2].value == pytest.approx(3.14, rel=1e-6)
    assert args[3].value == "hello"


def test_tags_round_trip_to_type_string():
    types = "ihfdsScmTFNI"
    values = ["7", "-9", "0.5", "2.25", "abc", "sym", "x", "0102037f"]
    args = build_arguments(types, values)
    assert "".join(a.tag for a in args) == types


def test_empty_or_missing_types_give_no_arguments():
    assert build_arguments(None, ["1"]) == []
    assert build_arguments("", []) == []


def test_flags_take_no_values():
    args = build_arguments("TFNI")
    assert args == [
        OscArgument(OscType.TRUE, True),
        OscArgument(OscType.FALSE, False),
        OscArgument(OscType.NIL, None),
        OscArgument(OscType.INFINITUM, math.inf),
    ]


def test_extra_values_are_ignored():
    args = build_arguments("i", ["4", "5", "6"])
    assert args == [OscArgument(OscType.INT32, 4)]


@pytest.mark.parametrize("text", [str(INT32_MAX), str(INT32_MIN), "+12", " 12"])
def test_int32_accepts_valid(text):
    (arg,) = build_arguments("i", [text])
    assert arg.value == int(text)


@pytest.mark.parametrize("text", [str(INT32_MAX + 1), str(INT32_MIN - 1)])
def test_int32_out_of_range(text):
    with pytest.raises(OscArgumentError, match="out of range"):
        build_arguments("i", [text])


@pytest.mark.parametrize("text", ["12a", "1.5", "0x10", "1_000", "12 "])
def test_int32_rejects_garbage(text):
    with pytest.raises(OscArgumentError, match="invalid value"):
        build_arguments("i", [text])


def test_int64_limits():
    (arg,) = build_arguments("h", [str(INT64_MAX)])
    assert arg.value == INT64_MAX
    (arg,) = build_arguments("h", [str(INT64_MIN)])
    assert arg.value == INT64_MIN
    with pytest.raises(OscArgumentError, match="out of range"):
        build_arguments("h", [str(INT64_MAX + 1)])


def test_double_keeps_full_precision():
    (arg,) = build_arguments("d", ["0.1"])
    assert arg.value == 0.1


def test_float_is_single_precision():
    (arg,) = build_arguments("f", ["0.1"])
    assert arg.value == pytest.approx(0.1, rel=1e-6)
    assert arg.value != 0.1


def test_float_accepts_c_spellings():
    (exp,) = build_arguments("d", ["1e3"])
    assert exp.value == 1000.0
    (inf,) = build_arguments("f", ["inf"])
    assert inf.value == math.inf
    (hexed,) = build_arguments("d", ["0x1p3"])
    assert hexed.value == 8.0


@pytest.mark.parametrize("text", ["abc", "1e", "1.5x", "1.5 "])
def test_float_rejects_garbage(text):
    with pytest.raises(OscArgumentError, match="invalid value"):
        build_arguments("f", [text])


def test_char_takes_first_character():
    (arg,) = build_arguments("c", ["hello"])
    assert arg == OscArgument(OscType.CHAR, "h")


def test_midi_packs_four_bytes_big_endian():
    (arg,) = build_arguments("m", ["90403f7f"])
    assert arg.value == bytes.fromhex("90403f7f")
    assert len(arg.value) == 4


def test_midi_rejects_non_hex():
    with pytest.raises(OscArgumentError, match="hexadecimal"):
        build_arguments("m", ["zz"])


def test_symbol_kept_without_strip_quotes():
    (arg,) = build_arguments("S", ['"name"'])
    assert arg == OscArgument(OscType.SYMBOL, '"name"')


def test_strip_quotes_removes_quotes_and_sends_strings():
    args = build_arguments("sS", ['"hello"', '"sym"'], strip_quotes=True)
    assert args == [
        OscArgument(OscType.STRING, "hello"),
        OscArgument(OscType.STRING, "sym"),
    ]


def test_strip_quotes_leaves_unquoted_text():
    (arg,) = build_arguments("s", ["plain"], strip_quotes=True)
    assert arg.value == "plain"


@pytest.mark.parametrize("types", ["b", "t"])
def test_blob_and_timetag_unsupported(types):
    with pytest.raises(OscArgumentError, match="not supported"):
        build_arguments(types, ["00"])


def test_blob_without_value_reports_missing_value():
    with pytest.raises(OscArgumentError, match="Value #1 is not given"):
        build_arguments("b", [])


def test_unknown_type_rejected():
    with pytest.raises(OscArgumentError, match="Type 'x'"):
        build_arguments("x")


def test_error_is_value_error():
    with pytest.raises(ValueError):
        build_arguments("i", ["nope"])