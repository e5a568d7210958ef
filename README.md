# octavox

A sample-by-sample voice engine. It tracks the zero crossings of an incoming
signal and uses them to drive a small bank of oscillators that replay the
recent input at a changed speed. The voices include an octave-down, a
square-wave distortion, flute and bass tones, and two vocal voices. A
tempo-synced delay works on a second input channel.

The package also has helpers for building typed OpenSound Control (OSC)
arguments from text, for OSC time tags and timestamped message files, and for
breaking library version strings into their numbers.

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Command line

```
octavox DEVICE_INDEX_FILE VOICE_FILE VOLUME_FILE GATE_FILE < input.raw > output.raw
```

The command reads interleaved 32-bit float stereo frames (native byte order)
from standard input. The left channel feeds the voice engine and the right
channel feeds the delay. It writes processed frames in the same format to
standard output: the voice on the left and the delay echoes on the right.

Each argument is the path of a small text file that holds one integer:

- **DEVICE_INDEX_FILE**: read once at start-up and reported on standard error
  as `device index: N`. It selects nothing; see below.
- **VOICE_FILE**: the voice to play (see the table).
- **VOLUME_FILE**: the output volume step, from 0 to 9.
- **GATE_FILE**: the noise-gate step, from 0 to 9. A higher number lets
  quieter input through.

The voice, volume and gate files are read at start-up and then every 50 ms,
so you can change the sound by writing a new number into a file. Each change
is reported on standard error as `purpose: old -> new`, and pitch tracking
starts over. A volume or gate outside 0–9 is reported as an error. At start-up
such a value, or a control file that cannot be read, makes the command exit
with status 1, as does a wrong number of arguments.

The engine starts with the electric bass voice, volume 5 and gate 1.

| Number | Voice               |
|-------:|---------------------|
| 1      | soprano recorder    |
| 2      | bass flute          |
| 3      | distortion          |
| 4      | reed                |
| 5      | flute               |
| 6      | electric bass       |
| 7      | vocal (octave-2)    |
| 8      | vocal               |
| 9      | raw pass-through    |
| 0      | raw with distortion |

Voices 7 and 8 track pitch over a lower, vocal range. The others use a
whistle range.

## What it does not do

- The command does not open a sound card or any audio device. It only works
  on raw sample streams piped through standard input and output, and the
  device index file has no effect beyond being reported.
- The OSC helpers only build, parse and format data. Nothing in the package
  opens a network socket or sends or receives OSC messages.

## Library

### Signal processing: `octavox.dsp`

- `sine_decimal(v)`, `atan_decimal(v)` and `clip(v)` are the waveshaping
  primitives.
- `saturate(v, distort)` clips the value to [-1, 1]. When `distort` is true it
  uses the soft-saturation curve of the distortion voices instead.
- `bpm_to_samples(bpm)` gives the length of one beat in samples at 44.1 kHz.
- `History` is the ring buffer of recent input samples, with running energy
  totals (`push`, `get`, `squared_sum`, `recent_squared_sum`, `reset`).
- `DurationTracker.update(sample)` follows how long the input has stayed
  loud.
- `Delay(tempo_bpm=118.5, repeats=3, volume=1.0)` is the tempo-synced echo.
  `process(sample)` stores a sample and returns the mix of its repeats.
- `Oscillator` is one voice layer. `next(history)` gives its next sample and
  `end_cycle()` counts down and retires it once it has faded.

### Voices: `octavox.voices`

`Voice` numbers the voices. `profile_for(voice)` returns a `VoiceProfile`
with the voice's gains and its `OscSpec` oscillator layout, or `None` for
voices that start no oscillators. `base_gains(voice)`, `gate_factor(gate)`
and `volume_level(level)` turn control values into gain factors.
`gate_factor` and `volume_level` raise `ValueError` outside 0–9.

### Engine: `octavox.engine`

`Engine(voice=Voice.EBASS, volume=5, gate=1, delay=None)` ties everything
together:

- `set_voice`, `set_volume` and `set_gate` change a control and restart pitch
  tracking.
- `process_sample(sample)` runs the voice channel only.
- `process_frame(sample, delay_sample)` returns the `(voice, delay)` output
  pair.
- `process_block(frames)` runs a sequence of `(sample, delay_sample)` frames.

```python
from octavox.engine import Engine
from octavox.voices import Voice

engine = Engine(voice=Voice.FLUTE, volume=7)
out = engine.process_block([(0.1, 0.0), (-0.1, 0.0)])
```

`read_number(path)` reads the leading integer of a control file, giving 0 if
there is none. `ControlFile(purpose, path, value, on_change, stream)` holds
one setting. Its `poll()` rereads the file, calls `on_change` and reports the
change when the value differs, and returns whether it changed.

### OSC arguments: `octavox.oscargs`

`build_arguments(types, values, strip_quotes=False)` turns a type-tag string
such as `"iTfs"` and a list of value strings into `OscArgument` values, each
with an `OscType` and a Python value. It raises `OscArgumentError` when a
value is missing, malformed or out of range, or when a type tag is not
supported. With `strip_quotes` a surrounding pair of double quotes is removed
from strings and symbols, and symbols become strings.

### Time tags and message files: `octavox.timetag`

- `TimeTag(sec, frac)` is an NTP-style timestamp with `add`, `subtract`,
  `diff`, `scale`, `to_float` and `TimeTag.now()`.
- `parse_timetag("sec.frac")` reads the hexadecimal form.
- `parse_line(line)` splits one message-file line into a `FileLine` (time
  tag, path, types, values).
- `group_bundles(lines, start=None, speed=1.0)` yields
  `(timetag, [(path, arguments), ...])` bundles of consecutive messages that
  share a send time. Times are rescaled by `speed` and counted from `start`.
- `format_dump_line(timetag, path, types, args)` formats a message as a dump
  line and shows an immediate time tag as the current time.

### Version strings: `octavox.version`

`version_info(version_string="0.30", so_version=(11, 0, 4))` splits a version
string and an interface `(current, revision, age)` triple into a
`VersionInfo`.