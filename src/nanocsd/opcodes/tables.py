"""Function table opcodes: reading, writing and saving."""

from ..enums import Rate
from ..opcode import Opcode, opcode, param
from ..signatures import exactly, prefix_then_repeating, signature

_TABLE_READ_SIGNATURES = (
    signature(Rate.AUDIO, [Rate.AUDIO] + exactly(3, Rate.INIT)),
    signature(Rate.CONTROL, [Rate.CONTROL] + exactly(3, Rate.INIT)),
    signature(Rate.INIT, exactly(4, Rate.INIT)),
)


@opcode("table", *_TABLE_READ_SIGNATURES)
class Table(Opcode):
    """Reads a table by direct indexing.

    ::

        ares table andx, ifn [, ixmode] [, ixoff]
        kres table kndx, ifn [, ixmode] [, ixoff]
        ires table indx, ifn [, ixmode] [, ixoff]
    """

    index = param()
    table = param()
    mode = param(0)
    offset = param(0)


@opcode("tablei", *_TABLE_READ_SIGNATURES)
class TableI(Opcode):
    """Reads a table with linear interpolation."""

    index = param()
    table = param()
    mode = param(0)
    offset = param(0)


@opcode("table3", *_TABLE_READ_SIGNATURES)
class Table3(Opcode):
    """Reads a table with cubic interpolation."""

    index = param()
    table = param()
    mode = param(0)
    offset = param(0)


@opcode(
    "tab",
    signature(Rate.AUDIO, [Rate.SIGNAL, Rate.INIT, Rate.INIT]),
    signature(Rate.CONTROL, [Rate.CONTROL, Rate.INIT, Rate.INIT]),
)
class Tab(Opcode):
    """Fast table read without wrap-around or index checks.

    The audio-rate variant is declared first and its index slot takes audio
    or control, so both index rates yield an audio-rate result.
    """

    index = param()
    table = param()
    mode = param(0)


@opcode("tab_i", signature(Rate.INIT, exactly(3, Rate.INIT)))
class TabI(Opcode):
    index = param()
    table = param()
    mode = param(0)


@opcode(
    "tablew",
    *(
        signature((), [rate, rate] + exactly(4, Rate.INIT))
        for rate in (Rate.AUDIO, Rate.CONTROL, Rate.INIT)
    ),
    channel_count=0,
)
class TableW(Opcode):
    """Writes to a table at audio or control rate.

    ::

        tablew asig, andx, ifn [, ixmode] [, ixoff] [, iwgmode]
    """

    source = param()
    index = param()
    table = param()
    mode = param(0)
    offset = param(0)
    guard_mode = param(0)


@opcode("tableiw", signature((), exactly(6, Rate.INIT)), channel_count=0)
class TableIW(Opcode):
    source = param()
    index = param()
    table = param()
    mode = param(0)
    offset = param(0)
    guard_mode = param(0)


@opcode(
    "tabw",
    *(
        signature((), [rate, rate] + exactly(2, Rate.INIT))
        for rate in (Rate.AUDIO, Rate.CONTROL)
    ),
    channel_count=0,
)
class TabW(Opcode):
    source = param()
    index = param()
    table = param()
    mode = param(0)


@opcode("tabw_i", signature((), exactly(4, Rate.INIT)), channel_count=0)
class TabWI(Opcode):
    source = param()
    index = param()
    table = param()
    mode = param(0)


@opcode(
    "ftsave",
    signature((), prefix_then_repeating([Rate.STRING, Rate.INIT], Rate.ANY)),
    channel_count=0,
)
class FtSave(Opcode):
    """Saves tables to a file at init time.

    ::

        ftsave "filename", iflag, ifn1 [, ifn2] [...]
    """

    filename = param()
    flag = param(0)
    tables = param(variadic=True)


@opcode(
    "ftsavek",
    signature(
        (),
        prefix_then_repeating([Rate.STRING, Rate.CONTROL, Rate.INIT], Rate.ANY),
    ),
    channel_count=0,
)
class FtSaveK(Opcode):
    """Saves tables to a file every time the trigger is non-zero."""

    filename = param()
    trigger = param()
    flag = param(0)
    tables = param(variadic=True)
