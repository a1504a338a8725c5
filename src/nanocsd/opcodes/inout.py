"""Signal input and output opcodes."""

from ..enums import Rate
from ..opcode import Opcode, OpcodeOutput, OpcodeRecursiveInput, opcode, param
from ..signatures import repeating, signature


@opcode(
    "inch",
    signature(repeating(Rate.AUDIO), repeating(Rate.CONTROL)),
    is_multichannel=True,
)
class InCh(Opcode):
    """Reads numbered channels of the external audio input.

    ::

        ain1[, ...] inch kchan1[,...]
    """

    channels = param(variadic=True)

    @classmethod
    def new(cls, *, channels: OpcodeRecursiveInput) -> OpcodeOutput:
        count = len(cls._collect_inputs({"channels": channels}))
        return cls._new_resolved(channel_count=count, channels=channels)


@opcode(
    "outch",
    signature((), repeating(Rate.CONTROL, Rate.AUDIO)),
    channel_count=0,
)
class OutCh(Opcode):
    """Writes audio signals to numbered output channels.

    ``pairs`` is a sequence of ``(channel, signal)`` pairs::

        outch kchan1, asig1 [, kchan2] [, asig2] [...]
    """

    pairs = param(variadic=True)
