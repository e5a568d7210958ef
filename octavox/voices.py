"""Voice presets: oscillator layouts, gains, gate and volume levels."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from octavox.dsp import DURATION, Oscillator, Waveform

OSCS_PER_LAYER = 6
OSC_COUNT = OSCS_PER_LAYER * DURATION

WHISTLE_RANGE = (14, 75)
VOCAL_RANGE = (50, 300)

VOLUMES = (
    0.026,
    0.039,
    0.059,
    0.088,
    0.132,
    0.198,
    0.296,
    0.444,
    0.667,
    1.000,
)


class Voice(enum.IntEnum):
    """Selectable voices, numbered as written in the voice control file."""

    RAWDIST = 0
    SOPRANO_RECORDER = 1
    BASS_FLUTE = 2
    DIST = 3
    REED = 4
    FLUTE = 5
    EBASS = 6
    VOCAL_2 = 7
    VOCAL_1 = 8
    RAW = 9


RAW_VOICES = frozenset({Voice.RAW, Voice.RAWDIST})
DISTORTED_VOICES = frozenset({Voice.DIST, Voice.RAWDIST})
VOCAL_VOICES = frozenset({Voice.VOCAL_1, Voice.VOCAL_2})


@dataclass(frozen=True)
class OscSpec:
    """Settings for one oscillator started at a zero crossing."""

    vol: float
    mode: Waveform
    speed: float
    cycle: float
    mod: int = 2
    lfo_rate: float = 0.0
    lfo_amplitude: float = 0.0
    lfo_is_volume: bool = True

    def build(self, cycles: int, adjustment: float, rough_input_period: float) -> Oscillator:
        """Start an oscillator for the crossing numbered ``cycles``."""
        if self.mod == 0:
            polarity = 1.0
        else:
            polarity = 1.0 if int(self.cycle * cycles) % self.mod else -1.0
        return Oscillator(
            mode=self.mode,
            speed=self.speed,
            vol=self.vol,
            polarity=polarity,
            pos=-adjustment,
            rough_input_period=rough_input_period,
            lfo_rate=self.lfo_rate,
            lfo_amplitude=self.lfo_amplitude,
            lfo_is_volume=self.lfo_is_volume,
        )


@dataclass(frozen=True)
class VoiceProfile:
    """Gains and oscillator layout a voice uses while it sounds."""

    gain: float
    ungain: float
    oscillators: tuple[OscSpec, ...]


_NAT = Waveform.NATURAL
_SQR = Waveform.SQUARE
_SIN = Waveform.SINE

_PROFILES: dict[Voice, VoiceProfile] = {
    Voice.SOPRANO_RECORDER: VoiceProfile(0.2, 1.0, (OscSpec(0.5, _NAT, 0.5, 1.0),)),
    Voice.BASS_FLUTE: VoiceProfile(
        0.3,
        1.0,
        (
            OscSpec(0.5, _SIN, 1.0 / 4, 1.0 / 4),
            OscSpec(0.2, _SIN, 2.0 / 4, 2.0 / 4),
            OscSpec(0.2, _SIN, 3.0 / 4, 3.0 / 4),
        ),
    ),
    Voice.DIST: VoiceProfile(0.125, 1.0, (OscSpec(0.5, _SQR, 0.5, 1.0),)),
    Voice.REED: VoiceProfile(0.3, 1.0, (OscSpec(0.5, _NAT, 0.25, 1.0 / 4),)),
    Voice.FLUTE: VoiceProfile(
        0.3,
        1.0,
        (
            OscSpec(0.5, _SIN, 0.5, 1.0 / 2),
            OscSpec(0.15, _SIN, 0.53, 2.0 / 2),
            OscSpec(0.15, _SIN, 0.48, 2.0 / 2),
            OscSpec(0.15, _SIN, 0.51, 3.0 / 2),
            OscSpec(0.15, _SIN, 0.49, 3.0 / 2),
        ),
    ),
    Voice.VOCAL_2: VoiceProfile(0.25, 0.5, (OscSpec(0.4, _NAT, 0.5, 0.5),)),
    Voice.VOCAL_1: VoiceProfile(0.09, 1.0, (OscSpec(0.4, _NAT, 0.5, 1.0),)),
    Voice.EBASS: VoiceProfile(
        0.25,
        1.0,
        (
            OscSpec(0.2, _SIN, 1.0 / 32, 8.0 / 16, lfo_is_volume=False),
            OscSpec(0.24, _SIN, 2.0 / 32, 2.0 / 16, lfo_is_volume=False),
            OscSpec(0.14, _SIN, 3.11 / 32, 3.0 / 16, lfo_is_volume=False),
            OscSpec(0.14, _SIN, 4.3 / 32, 4.0 / 16, lfo_is_volume=False),
            OscSpec(0.06, _SIN, 5.7 / 32, 5.0 / 16, lfo_is_volume=False),
            OscSpec(0.06, _SIN, 6.1 / 32, 6.0 / 16, lfo_is_volume=False),
        ),
    ),
}


def _as_voice(voice: int) -> Voice | None:
    try:
        return Voice(voice)
    except ValueError:
        return None


def profile_for(voice: int) -> VoiceProfile | None:
    """The oscillator profile of ``voice``, or None if it starts no oscillators."""
    known = _as_voice(voice)
    if known is None:
        return None
    return _PROFILES.get(known)


def base_gains(voice: int) -> tuple[float, float]:
    """Input gain and output make-up gain applied when ``voice`` is selected."""
    if voice == Voice.RAW:
        return 0.125, 0.7
    if voice == Voice.RAWDIST:
        return 0.5, 0.25
    return 0.25, 1.0


def _level(index: int) -> float:
    if not 0 <= index < len(VOLUMES):
        raise ValueError(f"level must be between 0 and {len(VOLUMES) - 1}")
    return VOLUMES[index]


def gate_factor(gate: int) -> float:
    """Squared multiplier applied to the noise gate thresholds for ``gate``."""
    if not 0 <= gate < len(VOLUMES):
        raise ValueError(f"gate must be between 0 and {len(VOLUMES) - 1}")
    ratio = _level(len(VOLUMES) - 1 - gate) / VOLUMES[5]
    return ratio * ratio


def volume_level(level: int) -> float:
    """Output amplitude for volume setting ``level``."""
    return _level(level)