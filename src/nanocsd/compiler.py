"""Csound orchestra text compiler for nanocsd."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .opcode import (
    BinaryOpNode,
    CallNode,
    ConstantProxy,
    FTable,
    InstrumentError,
    OutputProxy,
    PField,
    UnaryOpNode,
)
from .enums import Rate, UnaryOperator

if TYPE_CHECKING:
    from .opcode import Instrument, OpcodeInput

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_RATE = 44100
DEFAULT_KSMPS = 64


@dataclass(frozen=True)
class Options:
    """Orchestra header configuration."""

    sample_rate: int = DEFAULT_SAMPLE_RATE
    ksmps: int = DEFAULT_KSMPS
    output_channel_count: int = 2
    input_channel_count: int | None = None
    zero_dbfs: float = 1.0

    def __post_init__(self) -> None:
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.ksmps <= 0:
            raise ValueError(f"ksmps must be positive, got {self.ksmps}")
        if self.output_channel_count <= 0:
            raise ValueError("output_channel_count must be positive")
        if self.input_channel_count is not None and self.input_channel_count <= 0:
            raise ValueError("input_channel_count must be positive")
        if self.zero_dbfs <= 0:
            raise ValueError(f"zero_dbfs must be positive, got {self.zero_dbfs}")

    @property
    def control_rate(self) -> float:
        return self.sample_rate / self.ksmps


def _compile_header(options: Options) -> list[str]:
    lines = [
        f"sr = {options.sample_rate}",
        f"ksmps = {options.ksmps}",
        f"nchnls = {options.output_channel_count}",
    ]
    if options.input_channel_count is not None:
        lines.append(f"nchnls_i = {options.input_channel_count}")
    lines.append(f"0dbfs = {_format_number(options.zero_dbfs)}")
    return lines


def _compile_input(input_: OpcodeInput, names: dict[OutputProxy, str]) -> str:
    if isinstance(input_, OutputProxy):
        try:
            return names[input_]
        except KeyError:
            raise InstrumentError(
                f"{input_!r} is not part of this instrument"
            ) from None
    if isinstance(input_, PField):
        return f"p{input_.number}"
    if isinstance(input_, FTable):
        return str(input_.number)
    if isinstance(input_, str):
        return _format_string(input_)
    if isinstance(input_, ConstantProxy):
        # a-rate slots need a signal, not a literal
        if input_.rate is Rate.AUDIO:
            to_audio = UnaryOperator.TO_AUDIO.function_name
            return f"{to_audio}({_format_number(input_.value)})"
        return _format_number(input_.value)
    return _format_number(float(input_))


def _compile_node(node: CallNode, names: dict[OutputProxy, str]) -> str:
    outputs = ", ".join(names[output] for output in node)
    arguments = [_compile_input(input_, names) for input_ in node.inputs]
    if isinstance(node, BinaryOpNode):
        left, right = arguments
        return f"{outputs} = {left} {node.operator.symbol} {right}"
    if isinstance(node, UnaryOpNode):
        if node.operator == UnaryOperator.NEGATIVE:
            return f"{outputs} = -{arguments[0]}"
        return f"{outputs} = {node.operator.function_name}({arguments[0]})"
    statement = " ".join(x for x in (outputs, node.name) if x)
    if arguments:
        statement += " " + ", ".join(arguments)
    return statement


def _compile_statements(instrument: Instrument) -> list[str]:
    names: dict[OutputProxy, str] = {}
    statements = []
    for i, node in enumerate(instrument.nodes):
        for output in node:
            suffix = f"_{output.index}" if len(node) > 1 else ""
            names[output] = f"{output.rate.token}{i}{suffix}"
        statements.append(_compile_node(node, names))
    return statements


def _format_number(value: float) -> str:
    return f"{value:.10g}"


def _format_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def compile_instrument_body(instrument: Instrument) -> str:
    """The statements of one instrument, without the ``instr`` wrapper."""
    return "\n".join(_compile_statements(instrument))


def _compile_instrument(instrument: Instrument, name: str | int) -> str:
    lines = [f"instr {name}"]
    for pfield in instrument.pfields:
        lines.append(
            f"; p{pfield.number} = {pfield.name} "
            f"(default {_format_number(pfield.default)})"
        )
    lines.extend(f"  {statement}" for statement in _compile_statements(instrument))
    lines.append("endin")
    return "\n".join(lines)


def compile_instruments(
    instrument: Instrument,
    *instruments: Instrument,
    options: Options | None = None,
    use_anonymous_names: bool = False,
) -> str:
    """Render instruments as a Csound orchestra, header first."""
    options = options or Options()
    instruments_ = (instrument,) + instruments
    blocks = ["\n".join(_compile_header(options))]
    for instrument_ in instruments_:
        blocks.append(
            _compile_instrument(
                instrument_,
                (
                    instrument_.anonymous_name
                    if instrument_.name is None or use_anonymous_names
                    else instrument_.name
                ),
            )
        )
    logger.debug("Compiled %d instrument(s)", len(instruments_))
    return "\n\n".join(blocks) + "\n"
