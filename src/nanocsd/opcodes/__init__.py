"""The opcode catalog, grouped by category module."""

from .converters import (
    DownSamp,
    Interp,
    UpSamp,
    ampdb,
    ampdbfs,
    ar,
    ceil,
    cpspch,
    dbamp,
    dbfsamp,
    floor,
    frac,
    int_,
    ir,
    kr,
    round_,
)
from .diskio import (
    DiskIn2,
    FileBit,
    FileLen,
    FileNchnls,
    FilePeak,
    FileSr,
    FOut,
    Mp3In,
    SoundIn,
)
from .inout import InCh, OutCh
from .looping import Flooper2, SndLoop
from .printing import Print, PrintK
from .strings import Sprintf, SprintfK, StrCat, StrCatK
from .tables import (
    FtSave,
    FtSaveK,
    Tab,
    TabI,
    Table,
    Table3,
    TableI,
    TableIW,
    TableW,
    TabW,
    TabWI,
)

__all__ = [
    "DiskIn2",
    "DownSamp",
    "FOut",
    "FileBit",
    "FileLen",
    "FileNchnls",
    "FilePeak",
    "FileSr",
    "Flooper2",
    "FtSave",
    "FtSaveK",
    "InCh",
    "Interp",
    "Mp3In",
    "OutCh",
    "Print",
    "PrintK",
    "SndLoop",
    "SoundIn",
    "Sprintf",
    "SprintfK",
    "StrCat",
    "StrCatK",
    "Tab",
    "TabI",
    "TabW",
    "TabWI",
    "Table",
    "Table3",
    "TableI",
    "TableIW",
    "TableW",
    "UpSamp",
    "ampdb",
    "ampdbfs",
    "ar",
    "ceil",
    "cpspch",
    "dbamp",
    "dbfsamp",
    "floor",
    "frac",
    "int_",
    "ir",
    "kr",
    "round_",
]
