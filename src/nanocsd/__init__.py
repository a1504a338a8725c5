"""nanocsd -- declarative, rate-checked Csound opcode bindings."""

__version__ = "0.1.0"

from .enums import BinaryOperator, Rate, UnaryOperator
from .signatures import (
    RateSequence,
    Signature,
    SignatureError,
    exactly,
    prefix_then_repeating,
    repeating,
    signature,
)
from .opcode import (
    OPCODES,
    CallNode,
    ConstantProxy,
    FTable,
    Instrument,
    InstrumentBuilder,
    InstrumentError,
    Opcode,
    OutputProxy,
    OverloadError,
    PField,
    expand,
    instrument,
    opcode,
    param,
    resolve,
    select_signature,
)
from .compiler import Options, compile_instruments
from .opcodes import *  # noqa: F403

__all__ = [
    "BinaryOperator",
    "CallNode",
    "ConstantProxy",
    "FTable",
    "Instrument",
    "InstrumentBuilder",
    "InstrumentError",
    "OPCODES",
    "Opcode",
    "Options",
    "OutputProxy",
    "OverloadError",
    "PField",
    "Rate",
    "RateSequence",
    "Signature",
    "SignatureError",
    "UnaryOperator",
    "compile_instruments",
    "exactly",
    "expand",
    "instrument",
    "opcode",
    "param",
    "prefix_then_repeating",
    "repeating",
    "resolve",
    "select_signature",
    "signature",
]
