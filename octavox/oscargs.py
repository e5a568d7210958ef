"""Build typed OSC message arguments from a type string and text values."""

from __future__ import annotations

import enum
import math
import re
import struct
from collections.abc import Sequence
from dataclasses import dataclass

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_C_SPACE = " \t\n\v\f\r"
_INTEGER = re.compile(r"[ \t\n\v\f\r]*[+-]?[0-9]+")
_HEX_FLOAT = re.compile(r"[+-]?0[xX]")
_MIDI_HEX = re.compile(r"([+-]?)(?:0[xX])?([0-9a-fA-F]+)")


class OscType(str, enum.Enum):
    """OSC type tags, as written in a type string."""

    INT32 = "i"
    FLOAT = "f"
    STRING = "s"
    BLOB = "b"
    INT64 = "h"
    TIMETAG = "t"
    DOUBLE = "d"
    SYMBOL = "S"
    CHAR = "c"
    MIDI = "m"
    TRUE = "T"
    FALSE = "F"
    NIL = "N"
    INFINITUM = "I"


_TAKES_VALUE = frozenset(
    {
        OscType.INT32,
        OscType.FLOAT,
        OscType.STRING,
        OscType.BLOB,
        OscType.INT64,
        OscType.TIMETAG,
        OscType.DOUBLE,
        OscType.SYMBOL,
        OscType.CHAR,
        OscType.MIDI,
    }
)


class OscArgumentError(ValueError):
    """A type string or one of its values cannot be turned into arguments."""


@dataclass(frozen=True)
class OscArgument:
    """One typed argument of an OSC message."""

    type: OscType
    value: object

    @property
    def tag(self) -> str:
        """The one-character type tag of this argument."""
        return self.type.value


def _parse_int(text: str, low: int, high: int) -> int:
    if text == "":
        return 0
    if not _INTEGER.fullmatch(text):
        raise OscArgumentError(f"An invalid value was given: '{text}'")
    value = int(text.lstrip(_C_SPACE))
    if not low <= value <= high:
        raise OscArgumentError(f"Value out of range: '{text}'")
    return value


def _parse_double(text: str) -> float:
    if text == "":
        return 0.0
    body = text.lstrip(_C_SPACE)
    invalid = OscArgumentError(f"An invalid value was given: '{text}'")
    if not body or "_" in body or body != body.rstrip(_C_SPACE):
        raise invalid
    try:
        return float(body)
    except ValueError:
        pass
    if _HEX_FLOAT.match(body):
        try:
            return float.fromhex(body)
        except ValueError:
            pass
    raise invalid


def _to_single(value: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _parse_midi(text: str) -> bytes:
    window = text.lstrip(_C_SPACE)[:8]
    match = _MIDI_HEX.match(window)
    if match is None:
        raise OscArgumentError(f"An invalid hexadecimal value was given: '{text}'")
    sign, digits = match.groups()
    number = int(digits, 16)
    if sign == "-":
        number = -number
    return (number % 2**32).to_bytes(4, "big")


def _strip_quotes(text: str) -> str:
    if text.endswith('"'):
        text = text[:-1]
    if text.startswith('"'):
        text = text[1:]
    return text


def _convert(tag: OscType, text: str | None, strip_quotes: bool) -> OscArgument:
    if tag is OscType.INT32:
        return OscArgument(tag, _parse_int(text, INT32_MIN, INT32_MAX))
    if tag is OscType.INT64:
        return OscArgument(tag, _parse_int(text, INT64_MIN, INT64_MAX))
    if tag is OscType.FLOAT:
        return OscArgument(tag, _to_single(_parse_double(text)))
    if tag is OscType.DOUBLE:
        return OscArgument(tag, _parse_double(text))
    if tag in (OscType.STRING, OscType.SYMBOL):
        if strip_quotes:
            return OscArgument(OscType.STRING, _strip_quotes(text))
        return OscArgument(tag, text)
    if tag is OscType.CHAR:
        return OscArgument(tag, text[0] if text else "\0")
    if tag is OscType.MIDI:
        return OscArgument(tag, _parse_midi(text))
    if tag is OscType.TRUE:
        return OscArgument(tag, True)
    if tag is OscType.FALSE:
        return OscArgument(tag, False)
    if tag is OscType.NIL:
        return OscArgument(tag, None)
    if tag is OscType.INFINITUM:
        return OscArgument(tag, math.inf)
    raise OscArgumentError(f"Type '{tag.value}' is not supported or invalid.")


def build_arguments(
    types: str | None,
    values: Sequence[str] = (),
    strip_quotes: bool = False,
) -> list[OscArgument]:
    """Convert ``values`` to arguments as described by the type string ``types``.

    Types T, F, N and I take no value; values left over are ignored. With
    ``strip_quotes`` a surrounding pair of double quotes is removed from
    strings and symbols, and symbols are sent as strings.
    """
    if not types:
        return []
    remaining = iter(values)
    arguments: list[OscArgument] = []
    for number, char in enumerate(types, start=1):
        try:
            tag = OscType(char)
        except ValueError:
            tag = None
        text: str | None = None
        if tag in _TAKES_VALUE:
            text = next(remaining, None)
            if text is None:
                raise OscArgumentError(f"Value #{number} is not given.")
        if tag is None:
            raise OscArgumentError(f"Type '{char}' is not supported or invalid.")
        arguments.append(_convert(tag, text, strip_quotes))
    return arguments