"""String formatting and concatenation opcodes."""

from ..enums import Rate
from ..opcode import Opcode, opcode, param
from ..signatures import prefix_then_repeating, signature


@opcode(
    "sprintf",
    signature(Rate.STRING, prefix_then_repeating([Rate.STRING], Rate.INIT)),
)
class Sprintf(Opcode):
    """printf-style formatting at init time.

    ::

        Sdst sprintf Sfmt, xarg1[, xarg2[, ... ]]
    """

    format = param()
    values = param(variadic=True)


@opcode(
    "sprintfk",
    signature(Rate.STRING, prefix_then_repeating([Rate.STRING], Rate.CONTROL)),
)
class SprintfK(Opcode):
    """printf-style formatting at init and performance time."""

    format = param()
    values = param(variadic=True)


@opcode("strcat", signature(Rate.STRING, [Rate.STRING, Rate.STRING]))
class StrCat(Opcode):
    left = param()
    right = param()


@opcode("strcatk", signature(Rate.STRING, [Rate.STRING, Rate.STRING]))
class StrCatK(Opcode):
    left = param()
    right = param()
