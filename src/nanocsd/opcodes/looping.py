"""Sample playback with optional looping."""

from ..enums import Rate
from ..opcode import Opcode, opcode, param
from ..signatures import exactly, signature


@opcode(
    "flooper2",
    signature(Rate.AUDIO, exactly(5, Rate.CONTROL) + exactly(5, Rate.INIT)),
)
class Flooper2(Opcode):
    """Crossfading looper with variable loop points.

    ::

        asig flooper2 kamp, kpitch, kloopstart, kloopend, kcrossfade, ifn \\
              [, istart, imode, ifenv, iskip]
    """

    amplitude = param()
    pitch = param()
    loop_start = param()
    loop_end = param()
    crossfade = param()
    table = param()
    start = param(0)
    mode = param(0)
    envelope_table = param(0)
    skip_init = param(0)


@opcode(
    "sndloop",
    signature(
        [Rate.AUDIO, Rate.CONTROL],
        [Rate.AUDIO, Rate.CONTROL, Rate.CONTROL, Rate.INIT, Rate.INIT],
    ),
    channel_count=2,
)
class SndLoop(Opcode):
    """Records input audio and plays it back in a loop.

    Yields the looped signal and a control-rate recording flag.
    """

    source = param()
    pitch = param()
    trigger = param()
    duration = param()
    fade = param()
