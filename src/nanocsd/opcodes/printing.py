"""Console printing opcodes."""

from ..enums import Rate
from ..opcode import Opcode, opcode, param
from ..signatures import repeating, signature


@opcode("print", signature((), repeating(Rate.INIT)), channel_count=0)
class Print(Opcode):
    """Prints init-time values.

    ::

        print iarg [, iarg1] [, iarg2] [...]
    """

    values = param(variadic=True)


@opcode(
    "printk",
    signature((), [Rate.INIT, Rate.CONTROL, Rate.INIT]),
    channel_count=0,
)
class PrintK(Opcode):
    """Prints one control-rate value every ``interval`` seconds."""

    interval = param()
    value = param()
    spacing = param(0)
