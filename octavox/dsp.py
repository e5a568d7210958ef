"""Signal-processing building blocks for the octave-down voice engine."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field

SAMPLE_RATE = 44100

HISTORY_LENGTH = 8192
RECENT_LENGTH = 256

DURATION = 3

DURATION_UNITS = 400
DURATION_BLOCKS = 100
DURATION_MAX_VAL = 0.04

SATURATION_BIAS = 0.5


def sine_decimal(v: float) -> float:
    """Sine of ``v`` measured in whole cycles, shifted by half a cycle."""
    return math.sin((v + 0.5) * math.pi * 2)


def clip(v: float) -> float:
    """Limit ``v`` to the range [-1, 1]."""
    return max(-1.0, min(1.0, v))


def atan_decimal(v: float) -> float:
    """Arctangent scaled so that the result lies in (-1, 1)."""
    return math.atan(v) / (math.pi / 2)


def saturate(v: float, distort: bool) -> float:
    """Clip ``v``, or push it through the distortion curve when ``distort``."""
    if not distort:
        return clip(v)
    c = sine_decimal(atan_decimal(v * 4))
    v += c
    v += c * c
    v += c ** 4
    v += c ** 7
    v -= SATURATION_BIAS
    v *= 0.55
    return atan_decimal(v / 4)


def bpm_to_samples(bpm: float) -> float:
    """Number of samples in one beat at ``bpm`` beats per minute."""
    return SAMPLE_RATE / (bpm / 60)


class DurationTracker:
    """Tracks how long the input has stayed loud, as a smoothed level."""

    def __init__(self) -> None:
        self._blocks = [0.0] * DURATION_BLOCKS
        self._position = 0
        self._total = 0.0
        self._count = 0
        self.value = 0.0

    def update(self, sample: float) -> float:
        """Feed one sample and return the current duration level."""
        self._total += abs(sample)
        self._count += 1
        if self._count > DURATION_UNITS:
            level = self._total / self._count
            self._total = 0.0
            self._count = 0
            self._position += 1
            self._blocks[self._position % DURATION_BLOCKS] = level

            running_min = -1.0
            accumulated = 0.0
            for back in range(DURATION_BLOCKS):
                block = self._blocks[(self._position - back) % DURATION_BLOCKS]
                if running_min < 0 or block < running_min:
                    running_min = block
                accumulated += running_min
            self.value = min(accumulated / DURATION_BLOCKS, DURATION_MAX_VAL)
        return self.value


class History:
    """Ring buffer of recent input samples with running energy totals."""

    def __init__(self) -> None:
        self._buffer = [0.0] * HISTORY_LENGTH
        self.position = 0
        self.squared = 0.0
        self.recent_squared = 0.0

    def reset(self) -> None:
        """Forget every stored sample."""
        self._buffer = [0.0] * HISTORY_LENGTH
        self.position = 0
        self.squared = 0.0
        self.recent_squared = 0.0

    def push(self, sample: float) -> None:
        """Store ``sample``, overwriting the oldest one."""
        buffer = self._buffer
        pos = self.position
        self.squared += sample * sample - buffer[pos] * buffer[pos]
        recent_pos = (pos - RECENT_LENGTH) % HISTORY_LENGTH
        self.recent_squared += sample * sample - buffer[recent_pos] * buffer[recent_pos]
        buffer[pos] = sample
        self.position = (pos + 1) % HISTORY_LENGTH

    def get(self, offset: int) -> float:
        """Sample ``offset`` slots behind the write position (1 is the newest)."""
        return self._buffer[(self.position - offset) % HISTORY_LENGTH]

    def squared_sum(self) -> float:
        """Sum of squares over the whole buffer, computed from scratch."""
        return sum(s * s for s in self._buffer)

    def recent_squared_sum(self) -> float:
        """Sum of squares over the buffer's final RECENT_LENGTH slots."""
        return sum(s * s for s in self._buffer[HISTORY_LENGTH - RECENT_LENGTH:])


class Delay:
    """Tempo-synced echo with evenly spaced, equally loud repeats."""

    def __init__(
        self,
        tempo_bpm: float = 118.5,
        repeats: int = 3,
        volume: float = 1.0,
        history_length: int | None = None,
    ) -> None:
        if repeats < 1:
            raise ValueError("a delay needs at least one repeat")
        self.tempo_bpm = tempo_bpm
        self.repeats = repeats
        self.volume = volume
        if history_length is None:
            # Enough room for the furthest repeat; reads behave as with any
            # longer buffer because unwritten slots are silent either way.
            history_length = math.ceil(bpm_to_samples(tempo_bpm) * repeats) + 2
        if history_length < 1:
            raise ValueError("history length must be positive")
        self._buffer = [0.0] * history_length
        self._write_pos = 0

    def process(self, sample: float) -> float:
        """Store ``sample`` and return the mix of its earlier echoes."""
        buffer = self._buffer
        length = len(buffer)
        write = self._write_pos % length
        buffer[write] = sample

        spacing = bpm_to_samples(self.tempo_bpm)
        out = 0.0
        for repeat in range(1, self.repeats + 1):
            read = write - spacing * repeat
            if read < 0:
                read %= length
            index = int(read)
            weight = 1 - (read - index)
            out += buffer[index % length] * weight
            out += buffer[(index + 1) % length] * (1 - weight)

        self._write_pos += 1
        return out * self.volume / self.repeats


class Waveform(enum.IntEnum):
    """How an oscillator shapes what it reads from the history."""

    NATURAL = 0
    SQUARE = 1
    SINE = 2


@dataclass(slots=True)
class Oscillator:
    """One voice layer replaying the input history at a changed speed."""

    mode: Waveform
    speed: float
    vol: float
    polarity: float
    pos: float
    rough_input_period: float
    lfo_rate: float = 0.0
    lfo_amplitude: float = 0.0
    lfo_is_volume: bool = True
    lfo_pos: float = 0.0
    active: bool = True
    amp: float = 0.0
    samples: int = 0
    total_amplitude: float = 0.0
    duration: int = field(default=DURATION)

    def next(self, history: History) -> float:
        """Produce the next output sample from ``history``."""
        if not self.active:
            return 0.0

        self.samples += 1
        if self.duration > 0:
            self.amp += 0.01 * (1 - self.amp)
        else:
            self.amp *= 0.95

        whole = int(self.pos)
        val_a = history.get(whole)
        val_b = history.get(int(self.pos + 1))
        amt_a = self.pos - whole
        val = val_a * amt_a + val_b * (1 - amt_a)
        self.total_amplitude += abs(val)

        if self.mode != Waveform.NATURAL:
            if self.mode == Waveform.SQUARE:
                val = 1.0 if val > 0 else -1.0
            elif self.mode == Waveform.SINE:
                val = sine_decimal(self.pos / self.rough_input_period)
            val *= self.total_amplitude / self.samples

        self.pos += self.speed
        val = self.amp * val * self.polarity * self.vol

        if self.lfo_amplitude > 0:
            lfo_amount = (sine_decimal(self.lfo_pos) + 1) * self.lfo_amplitude
            if self.lfo_is_volume:
                val = val * lfo_amount + val * (1 - self.lfo_amplitude)
            else:
                self.pos += lfo_amount
            self.lfo_pos += 1 / self.lfo_rate
        return val

    def end_cycle(self) -> None:
        """Note that an input cycle has finished; fade out and retire when done."""
        if not self.active:
            return
        if self.duration > 0:
            self.duration -= 1
        if self.duration < 1 and self.amp < 0.001:
            self.active = False