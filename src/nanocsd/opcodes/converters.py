"""Rate, amplitude and pitch conversions."""

from typing import SupportsFloat

from ..enums import Rate, UnaryOperator
from ..opcode import (
    ConstantProxy,
    Opcode,
    OpcodeInput,
    Operand,
    OverloadError,
    apply_unary,
    opcode,
    param,
)
from ..signatures import signature


@opcode("downsamp", signature(Rate.CONTROL, [Rate.AUDIO, Rate.INIT]))
class DownSamp(Opcode):
    source = param()
    window_length = param(0)


@opcode("upsamp", signature(Rate.AUDIO, [Rate.CONTROL]))
class UpSamp(Opcode):
    source = param()


@opcode("interp", signature(Rate.AUDIO, [Rate.CONTROL, Rate.INIT, Rate.INIT]))
class Interp(Opcode):
    """Converts a control signal to audio rate with linear interpolation."""

    source = param()
    skip_init = param(0)
    mode = param(0)


_CASTS = {
    Rate.CONTROL: UnaryOperator.TO_CONTROL,
    Rate.AUDIO: UnaryOperator.TO_AUDIO,
}


def _cast(source: OpcodeInput, rate: Rate, name: str) -> Operand:
    if isinstance(source, SupportsFloat) and not isinstance(source, Operand):
        return ConstantProxy(source, rate=rate)
    if isinstance(source, ConstantProxy):
        return ConstantProxy(source.value, rate=rate)
    source_rate = Rate.from_expr(source)
    if source_rate is rate and isinstance(source, Operand):
        return source
    operator_ = _CASTS.get(rate)
    if operator_ is None:
        raise OverloadError(name, [source_rate])
    try:
        return apply_unary(source, operator_)
    except OverloadError as error:
        raise OverloadError(name, error.rates, error.signatures) from None


def ir(source: OpcodeInput) -> Operand:
    """Use a constant or init-rate value as an init-rate operand."""
    return _cast(source, Rate.INIT, "ir")


def kr(source: OpcodeInput) -> Operand:
    """Use a value as a control-rate operand.

    Constants are retagged in place; init-rate expressions go through
    Csound's ``k()``.
    """
    return _cast(source, Rate.CONTROL, "kr")


def ar(source: OpcodeInput) -> Operand:
    """Use a value as an audio-rate operand, via ``a()`` when needed."""
    return _cast(source, Rate.AUDIO, "ar")


def ampdb(source: OpcodeInput) -> Operand:
    """Amplitude equivalent of a decibel value (60 dB is 1000)."""
    return apply_unary(source, UnaryOperator.AMPDB)


def ampdbfs(source: OpcodeInput) -> Operand:
    """Amplitude equivalent of a full-scale decibel value."""
    return apply_unary(source, UnaryOperator.AMPDBFS)


def dbamp(source: OpcodeInput) -> Operand:
    """Decibel equivalent of a raw amplitude. Init or control rate only."""
    return apply_unary(source, UnaryOperator.DBAMP)


def dbfsamp(source: OpcodeInput) -> Operand:
    return apply_unary(source, UnaryOperator.DBFSAMP)


def cpspch(source: OpcodeInput) -> Operand:
    """Cycles per second of a pitch-class value (8.09 is A440)."""
    return apply_unary(source, UnaryOperator.CPSPCH)


def frac(source: OpcodeInput) -> Operand:
    return apply_unary(source, UnaryOperator.FRACTIONAL_PART)


def floor(source: OpcodeInput) -> Operand:
    return apply_unary(source, UnaryOperator.FLOOR)


def ceil(source: OpcodeInput) -> Operand:
    return apply_unary(source, UnaryOperator.CEILING)


def int_(source: OpcodeInput) -> Operand:
    """Integer part, rendered as Csound's ``int()``."""
    return apply_unary(source, UnaryOperator.INTEGER_PART)


def round_(source: OpcodeInput) -> Operand:
    return apply_unary(source, UnaryOperator.ROUND)
