"""
01_file_player.py -- Looping file player with a level meter.

Builds two instruments:

1. **player** -- reads a stereo MP3, scales it by a p-field amplitude and
   writes the pair to output channels 1 and 2 with ``outch``.

2. **looper** -- reads a mono table with ``flooper2`` and records the
   result to disk with ``fout``, printing its peak every half second.

The orchestra text is printed to stdout; pipe it into a ``.orc`` file to
render with Csound.
"""

import logging

from nanocsd import InstrumentBuilder, Options, compile_instruments
from nanocsd.opcodes import (
    DownSamp,
    Flooper2,
    FOut,
    Mp3In,
    OutCh,
    PrintK,
    dbamp,
    kr,
)


def build_player():
    with InstrumentBuilder(amplitude=0.5) as builder:
        left, right = Mp3In.new(filename="song.mp3")
        gain = builder["amplitude"]
        OutCh.new(pairs=[(kr(1), left * gain), (kr(2), right * gain)])
    return builder.build(name="player")


def build_looper():
    with InstrumentBuilder(table=1.0, loop_end=2.0) as builder:
        signal = Flooper2.new(
            amplitude=kr(0.8),
            pitch=kr(1),
            loop_start=kr(0),
            loop_end=kr(builder["loop_end"]),
            crossfade=kr(0.05),
            table=builder["table"],
        )
        FOut.new(filename="loop.wav", format=14, sources=[signal])
        PrintK.new(interval=0.5, value=dbamp(DownSamp.new(source=signal)))
    return builder.build(name="looper")


def main():
    logging.basicConfig(level=logging.DEBUG)
    options = Options(sample_rate=48000, ksmps=32)
    print(compile_instruments(build_player(), build_looper(), options=options))


if __name__ == "__main__":
    main()
