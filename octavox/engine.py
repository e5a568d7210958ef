"""Real-time octave-down voice engine driven by small control files."""

from __future__ import annotations

import math
import re
import sys
import threading
from array import array
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from octavox.dsp import (
    DURATION,
    HISTORY_LENGTH,
    RECENT_LENGTH,
    Delay,
    DurationTracker,
    History,
    Oscillator,
    clip,
    saturate,
)
from octavox.voices import (
    DISTORTED_VOICES,
    OSC_COUNT,
    OSCS_PER_LAYER,
    RAW_VOICES,
    VOCAL_RANGE,
    VOCAL_VOICES,
    WHISTLE_RANGE,
    Voice,
    base_gains,
    gate_factor,
    profile_for,
    volume_level,
)

GAIN = 1.0
VOLUME = 1.0
GATE_SQUARED = 0.01 * 0.01
RECENT_GATE_SQUARED = 40 * 40 * GATE_SQUARED
DRIFT_RESET_TICKS = 441000
DEFAULT_ROUGH_PERIOD = 40.0
ALPHA_HIGH = 0.1
ALPHA_LOW = 0.01
FRAMES_PER_BUFFER = 128
POLL_INTERVAL = 0.05

_NUMBER_PREFIX = re.compile(r"\s*([+-]?\d+)")


class Engine:
    """Turns an input signal into an octave-down voice plus a delayed channel."""

    def __init__(
        self,
        voice: int = Voice.EBASS,
        volume: int = 5,
        gate: int = 1,
        delay: Delay | None = None,
    ) -> None:
        volume_level(volume)
        gate_factor(gate)
        self.voice = int(voice)
        self.volume = volume
        self.gate = gate
        self.delay = delay if delay is not None else Delay()
        self.history = History()
        self.duration = DurationTracker()
        self.oscillators: list[Oscillator | None] = [None] * OSC_COUNT
        self.ticks = 0
        self.output = 0.0
        self._reset()

    def _reset(self) -> None:
        self.history.reset()
        self.cycles = 0
        self.samples_since_last_crossing = 0.0
        self.positive = True
        self.previous_sample = 0.0
        self.rough_input_period = DEFAULT_ROUGH_PERIOD
        self.gain, self.ungain = base_gains(self.voice)
        self.gate_squared = gate_factor(self.gate)

    def set_voice(self, voice: int) -> None:
        """Switch voice and restart pitch tracking."""
        self.voice = int(voice)
        self._reset()

    def set_volume(self, volume: int) -> None:
        """Select output volume level 0-9 and restart pitch tracking."""
        volume_level(volume)
        self.volume = volume
        self._reset()

    def set_gate(self, gate: int) -> None:
        """Select noise gate level 0-9 and restart pitch tracking."""
        gate_factor(gate)
        self.gate = gate
        self._reset()

    def _start_oscillators(self, adjustment: float) -> None:
        profile = profile_for(self.voice)
        if profile is None:
            return
        self.gain = profile.gain
        self.ungain = profile.ungain
        offset = (self.cycles % DURATION) * OSCS_PER_LAYER
        for slot, spec in enumerate(profile.oscillators, start=offset):
            self.oscillators[slot] = spec.build(
                self.cycles, adjustment, self.rough_input_period
            )

    def _on_crossing(self, sample: float) -> None:
        try:
            adjustment = sample / (self.previous_sample - sample)
        except ZeroDivisionError:
            adjustment = 0.0
        if math.isnan(adjustment):
            adjustment = 0.0
        self.samples_since_last_crossing -= adjustment
        self.rough_input_period = self.samples_since_last_crossing

        low, high = VOCAL_RANGE if self.voice in VOCAL_VOICES else WHISTLE_RANGE
        if low < self.rough_input_period < high:
            self._start_oscillators(adjustment)

        self.cycles += 1
        for osc in self.oscillators:
            if osc is not None:
                osc.end_cycle()

        self.positive = False
        self.samples_since_last_crossing = -adjustment

    def process_sample(self, sample: float) -> float:
        """Feed one input sample and return the raw voice output."""
        if self.voice in RAW_VOICES:
            return sample * self.gain

        history = self.history
        history.push(sample)
        self.duration.update(sample)

        # Recompute the running energy from scratch now and then to avoid drift.
        self.ticks += 1
        if self.ticks % DRIFT_RESET_TICKS == 0:
            history.squared = history.squared_sum()
        if history.position == HISTORY_LENGTH - 1:
            history.recent_squared = history.recent_squared_sum()

        self.samples_since_last_crossing += 1

        if self.positive:
            if sample < 0:
                self._on_crossing(sample)
        elif sample > 0:
            self.positive = True

        self.previous_sample = sample

        val = sum(osc.next(history) for osc in self.oscillators if osc is not None)

        if (
            history.squared / HISTORY_LENGTH < GATE_SQUARED * self.gate_squared
            and history.recent_squared / RECENT_LENGTH
            < RECENT_GATE_SQUARED * self.gate_squared
        ):
            val = 0.0

        return val * GAIN * self.gain

    def process_frame(self, sample: float, delay_sample: float) -> tuple[float, float]:
        """Process one stereo frame: voice input and delay input."""
        alpha = ALPHA_LOW if self.voice == Voice.EBASS else ALPHA_HIGH
        distort = self.voice in DISTORTED_VOICES

        val = self.process_sample(sample)
        delay_out = self.delay.process(delay_sample)

        self.output += alpha * (val - self.output)
        out = self.output / alpha

        out = saturate(out, distort)
        delay_out = saturate(delay_out, distort)

        out *= VOLUME * volume_level(self.volume) * self.ungain
        return clip(out), delay_out

    def process_block(
        self, frames: Iterable[tuple[float, float]]
    ) -> list[tuple[float, float]]:
        """Process a sequence of stereo frames."""
        return [self.process_frame(sample, delay) for sample, delay in frames]


def _parse_number(text: str) -> int:
    match = _NUMBER_PREFIX.match(text)
    return int(match.group(1)) if match else 0


def read_number(path: str | Path) -> int:
    """Leading integer of the first 15 bytes of ``path``, or 0 if there is none."""
    with open(path, "rb") as handle:
        head = handle.read(15)
    return _parse_number(head.decode("latin-1"))


@dataclass
class ControlFile:
    """An integer setting kept in a file and applied whenever it changes."""

    purpose: str
    path: str | Path
    value: int
    on_change: Callable[[int], None] | None = None
    stream: TextIO | None = None

    def poll(self) -> bool:
        """Re-read the file; apply and report the value if it changed."""
        new_value = read_number(self.path)
        if new_value == self.value:
            return False
        if self.on_change is not None:
            self.on_change(new_value)
        print(
            f"{self.purpose}: {self.value} -> {new_value}",
            file=self.stream if self.stream is not None else sys.stdout,
        )
        self.value = new_value
        return True


def _run_stream(engine: Engine, lock: threading.Lock) -> None:
    source = sys.stdin.buffer
    sink = sys.stdout.buffer
    frame_bytes = 2 * array("f").itemsize
    pending = b""
    while True:
        data = source.read(FRAMES_PER_BUFFER * frame_bytes)
        if not data:
            break
        pending += data
        usable = len(pending) - len(pending) % frame_bytes
        if not usable:
            continue
        samples = array("f", pending[:usable])
        pending = pending[usable:]
        with lock:
            frames = engine.process_block(zip(samples[0::2], samples[1::2]))
        block = array("f", (value for frame in frames for value in frame))
        sink.write(block.tobytes())
        sink.flush()


def main(argv: list[str] | None = None) -> int:
    """Process interleaved float32 stereo frames from stdin to stdout."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 4:
        prog = Path(sys.argv[0]).name if sys.argv and sys.argv[0] else "octavox"
        print(f"usage: {prog} /device/index /voice/file /volume/file /gate/file")
        return 1
    device_path, voice_path, volume_path, gate_path = args

    try:
        device_index = read_number(device_path)
    except OSError as exc:
        print(f"can't open file: {exc}\n  in: {device_path}", file=sys.stderr)
        return 1
    print(f"device index: {device_index}", file=sys.stderr)

    engine = Engine()
    lock = threading.Lock()
    controls = [
        ControlFile("voice", voice_path, engine.voice, engine.set_voice, sys.stderr),
        ControlFile("volume", volume_path, engine.volume, engine.set_volume, sys.stderr),
        ControlFile("gate", gate_path, engine.gate, engine.set_gate, sys.stderr),
    ]

    def poll_all() -> None:
        with lock:
            for control in controls:
                control.poll()

    try:
        poll_all()
    except OSError as exc:
        print(f"can't open file: {exc}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"bad setting: {exc}", file=sys.stderr)
        return 1

    stop = threading.Event()

    def poller() -> None:
        while not stop.wait(POLL_INTERVAL):
            try:
                poll_all()
            except (OSError, ValueError) as exc:
                print(f"control error: {exc}", file=sys.stderr)

    thread = threading.Thread(target=poller, daemon=True)
    thread.start()
    try:
        _run_stream(engine, lock)
    except KeyboardInterrupt:
        pass
    finally:
        stop.set()
        thread.join()
    return 0