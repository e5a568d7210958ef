"""OSC time tags, timed message files and dump formatting."""

from __future__ import annotations

import math
import re
import time
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass

from octavox.oscargs import OscArgument, OscType, build_arguments

_WORD = 2**32
_ULONG_MAX = 2**64 - 1
_FRACTION = 1.0 / _WORD
# Seconds between the NTP epoch (1900) and the Unix epoch (1970).
_NTP_OFFSET = 2208988800

_HEX_PREFIX = re.compile(r"[ \t\n\v\f\r]*([+-]?)(0[xX](?=[0-9a-fA-F]))?([0-9a-fA-F]*)")


@dataclass(frozen=True)
class TimeTag:
    """An NTP-style time: whole seconds and a 32-bit binary fraction."""

    sec: int
    frac: int

    def __post_init__(self) -> None:
        for name, value in (("sec", self.sec), ("frac", self.frac)):
            if not 0 <= value < _WORD:
                raise ValueError(f"{name} must fit in 32 unsigned bits")

    @classmethod
    def now(cls) -> TimeTag:
        """The current time."""
        stamp = time.time() + _NTP_OFFSET
        whole = math.floor(stamp)
        return cls(whole % _WORD, int((stamp - whole) * _WORD) % _WORD)

    @property
    def is_immediate(self) -> bool:
        """Whether this is the special tag meaning "as soon as possible"."""
        return self == IMMEDIATE

    def add(self, other: TimeTag) -> TimeTag:
        """Sum of two tags, carrying fraction overflow into the seconds."""
        sec = self.sec + other.sec
        frac = (self.frac + other.frac) % _WORD
        if frac < other.frac:
            sec += 1
        return TimeTag(sec % _WORD, frac)

    def subtract(self, other: TimeTag) -> TimeTag:
        """Difference of two tags, borrowing from the seconds when needed."""
        sec = self.sec - other.sec
        if self.frac < other.frac:
            sec -= 1
        return TimeTag(sec % _WORD, (self.frac - other.frac) % _WORD)

    def diff(self, other: TimeTag) -> float:
        """Seconds from ``other`` to this tag."""
        return (self.sec - other.sec) + (self.frac - other.frac) * _FRACTION

    def to_float(self) -> float:
        """This tag in seconds."""
        return self.sec + self.frac * _FRACTION

    def scale(self, factor: float) -> TimeTag:
        """This tag multiplied by ``factor``."""
        value = factor * self.to_float()
        whole = math.floor(value)
        frac = int((value - whole) * _WORD)
        return TimeTag(whole % _WORD, frac % _WORD)


IMMEDIATE = TimeTag(0, 1)


def _parse_hex(text: str) -> int:
    match = _HEX_PREFIX.match(text)
    sign, _, digits = match.groups()
    value = int(digits, 16) if digits else 0
    if value > _ULONG_MAX:
        value = _ULONG_MAX
    elif sign == "-":
        value = -value % (_ULONG_MAX + 1)
    return value % _WORD


def parse_timetag(text: str) -> TimeTag:
    """Parse ``seconds.fraction`` written in hexadecimal."""
    parts = [part for part in text.split(".") if part]
    sec = _parse_hex(parts[0]) if parts else 0
    frac = _parse_hex(parts[1]) if len(parts) > 1 else 0
    return TimeTag(sec, frac)


@dataclass(frozen=True)
class FileLine:
    """One line of a message file.

    ``timetag`` is None for lines that start with the path and are sent
    immediately; ``path`` is None for a line holding only a time tag.
    """

    timetag: TimeTag | None
    path: str | None
    types: str | None = None
    values: tuple[str, ...] = ()


def _tokens(line: str) -> list[str]:
    return [token for token in re.split(r"[ \r\n]", line) if token]


def parse_line(line: str) -> FileLine | None:
    """Split a message-file line into time tag, path, types and values."""
    tokens = _tokens(line)
    if not tokens:
        return None
    timetag: TimeTag | None = None
    if not tokens[0].startswith("/"):
        timetag = parse_timetag(tokens[0])
        tokens = tokens[1:]
    if not tokens:
        return FileLine(timetag, None)
    path, rest = tokens[0], tokens[1:]
    types = rest[0] if rest else None
    return FileLine(timetag, path, types, tuple(rest[1:]))


Message = tuple[str, list[OscArgument]]


def group_bundles(
    lines: Iterable[str],
    start: TimeTag | None = None,
    speed: float = 1.0,
) -> Iterator[tuple[TimeTag, list[Message]]]:
    """Group consecutive messages sharing a send time into bundles.

    Times in the file are taken relative to its first time tag, divided by
    ``speed`` and counted from ``start`` (the current time by default).
    Each bundle comes out as ``(timetag, [(path, arguments), ...])``.
    """
    if speed == 0:
        raise ValueError("speed must not be zero")
    multiplier = 1.0 / speed
    origin = start if start is not None else TimeTag.now()
    file_start: TimeTag | None = None
    current: tuple[TimeTag, list[Message]] | None = None

    for raw in lines:
        entry = parse_line(raw)
        if entry is None:
            continue
        if entry.timetag is None:
            when = IMMEDIATE
        else:
            if file_start is None:
                file_start = entry.timetag
            when = entry.timetag.subtract(file_start).scale(multiplier).add(origin)
        if entry.path is None:
            continue
        message = (entry.path, build_arguments(entry.types, entry.values, strip_quotes=True))
        if current is not None and current[0] == when:
            current[1].append(message)
        else:
            if current is not None:
                yield current
            current = (when, [message])

    if current is not None:
        yield current


def _render(argument: OscArgument) -> str:
    kind, value = argument.type, argument.value
    if kind in (OscType.INT32, OscType.INT64):
        return str(value)
    if kind in (OscType.FLOAT, OscType.DOUBLE):
        return f"{value:f}"
    if kind in (OscType.STRING, OscType.SYMBOL):
        return f'"{value}"'
    if kind is OscType.CHAR:
        return f"'{value}'"
    if kind is OscType.MIDI:
        return "MIDI [" + " ".join(f"0x{byte:02x}" for byte in value) + "]"
    if kind is OscType.TRUE:
        return "#T"
    if kind is OscType.FALSE:
        return "#F"
    if kind is OscType.NIL:
        return "Nil"
    if kind is OscType.INFINITUM:
        return "Infinitum"
    if kind is OscType.TIMETAG and isinstance(value, TimeTag):
        return f"{value.sec:08x}.{value.frac:08x}"
    if kind is OscType.BLOB and isinstance(value, (bytes, bytearray)):
        return "[" + " ".join(f"{byte:02x}" for byte in value) + "]"
    return str(value)


def format_dump_line(
    timetag: TimeTag,
    path: str,
    types: str,
    args: Sequence[OscArgument],
) -> str:
    """One dump line: time tag, path, type string and the arguments.

    An immediate time tag is shown as the current time.
    """
    shown = TimeTag.now() if timetag.is_immediate else timetag
    head = f"{shown.sec:08x}.{shown.frac:08x} {path} {types}"
    return head + "".join(" " + _render(arg) for arg in args)