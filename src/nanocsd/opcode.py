"""
Opcode bindings, rate-overload resolution and the instrument builder.

Opcodes are declared as classes, one ``param()`` per argument, and decorated
with ``@opcode`` which lists the opcode's overload set::

    @opcode(
        "downsamp",
        signature(Rate.CONTROL, [Rate.AUDIO, Rate.INIT]),
    )
    class DownSamp(Opcode):
        source = param()
        window_length = param(0)

    k1 = DownSamp.new(source=a1)

Calling ``new`` infers the rate of every argument, picks the first declared
signature that accepts them and records a ``CallNode`` in the active
``InstrumentBuilder``.
"""

import hashlib
import logging
import math
import operator
import threading
import uuid
from collections.abc import Sequence as SequenceABC
from dataclasses import dataclass
from types import MappingProxyType
from typing import (
    Any,
    Callable,
    Iterable,
    Iterator,
    NamedTuple,
    SupportsFloat,
    Union,
    overload,
)

from .enums import BinaryOperator, Rate, UnaryOperator
from .signatures import Signature, SignatureError, signature

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class OverloadError(Exception):
    """No declared signature accepts the rates of the supplied arguments."""

    def __init__(
        self,
        name: str,
        rates: Iterable[Rate],
        signatures: Iterable[Signature] = (),
    ) -> None:
        self.name = name
        self.rates = tuple(rates)
        self.signatures = tuple(signatures)
        supplied = ", ".join(rate.name for rate in self.rates) or "no arguments"
        message = f"no overload of {name!r} accepts ({supplied})"
        if self.signatures:
            declared = "; ".join(str(x) for x in self.signatures)
            message += f"; declared: {declared}"
        super().__init__(message)


class InstrumentError(Exception):
    pass


# ---------------------------------------------------------------------------
# Type aliases
# ---------------------------------------------------------------------------

OpcodeInput = Union[SupportsFloat, str, "Operand", "FTable"]
OpcodeRecursiveInput = Union[OpcodeInput, SequenceABC["OpcodeRecursiveInput"]]
OpcodeOutput = Union["OutputProxy", "CallNode"]


# ---------------------------------------------------------------------------
# @opcode / @param decorator support
# ---------------------------------------------------------------------------


class Missing:
    """Sentinel for required parameters (no default)."""

    pass


MISSING = Missing()


class Param(NamedTuple):
    default: "Missing | float | str | ConstantProxy" = MISSING
    variadic: bool = False


_registry: dict[str, type["Opcode"]] = {}

OPCODES = MappingProxyType(_registry)
"""Read-only view of every declared opcode binding, keyed by opcode name."""


def _format_value(value: object) -> str:
    if isinstance(value, Missing):
        return "Missing()"
    if isinstance(value, ConstantProxy):
        return f"ConstantProxy({value.value!r}, rate=Rate.{value.rate.name})"
    return repr(value)


def _get_fn_globals() -> dict[str, Any]:
    return {
        "ConstantProxy": ConstantProxy,
        "Missing": Missing,
        "OpcodeRecursiveInput": OpcodeRecursiveInput,
        "Rate": Rate,
    }


def _create_fn(
    *,
    cls: type["Opcode"],
    name: str,
    args: list[str],
    body: list[str],
    return_type: Any,
    globals_: dict[str, Any] | None = None,
    decorator: Callable[..., Any] | None = None,
    override: bool = False,
) -> None:
    if name in cls.__dict__ and not override:
        return
    globals_ = globals_ or {}
    locals_ = {"_return_type": return_type}
    args_ = ",\n        ".join(args)
    body_ = "\n".join(f"        {line}" for line in body)
    text = f"    def {name}(\n        {args_}\n    ) -> _return_type:\n{body_}"
    local_vars = ", ".join(locals_.keys())
    text = f"def __create_fn__({local_vars}):\n{text}\n    return {name}"
    namespace: dict[str, Callable[..., Any]] = {}
    exec(text, globals_, namespace)
    value = namespace["__create_fn__"](**locals_)
    value.__qualname__ = f"{cls.__qualname__}.{value.__name__}"
    if decorator:
        value = decorator(value)
    setattr(cls, name, value)


def _add_param_fn(cls: type["Opcode"], name: str, index: int, variadic: bool) -> None:
    _create_fn(
        cls=cls,
        name=name,
        args=["self"],
        body=(
            [f"return self._inputs[{index}:]"]
            if variadic
            else [f"return self._inputs[{index}]"]
        ),
        decorator=property,
        globals_=_get_fn_globals(),
        override=True,
        return_type=Any,
    )


def _add_new_fn(
    cls: type["Opcode"],
    params: dict[str, Param],
    is_multichannel: bool,
    channel_count: int,
) -> None:
    args = ["cls"]
    if params or is_multichannel:
        args.append("*")
    for key, param_ in params.items():
        prefix = f"{key}: OpcodeRecursiveInput"
        args.append(
            f"{prefix} = {_format_value(param_.default)}"
            if not isinstance(param_.default, Missing)
            else prefix
        )
    body = ["return cls._new_resolved("]
    if is_multichannel:
        args.append(f"channel_count: int = {channel_count}")
        body.append("    channel_count=channel_count,")
    body.extend(f"    {key}={key}," for key in params)
    body.append(")")
    _create_fn(
        cls=cls,
        name="new",
        args=args,
        body=body,
        decorator=classmethod,
        globals_=_get_fn_globals(),
        return_type=OpcodeOutput,
    )


def _check_signature(
    cls: type["Opcode"],
    signature_: Signature,
    scalar_count: int,
    has_variadic: bool,
    is_multichannel: bool,
    channel_count: int,
) -> None:
    if is_multichannel:
        if not signature_.outputs.is_repeating:
            raise SignatureError(
                f"{cls.__name__}: multichannel signature {signature_} "
                "must declare repeating outputs"
            )
    elif signature_.outputs.is_repeating or len(signature_.outputs.prefix) != (
        channel_count
    ):
        raise SignatureError(
            f"{cls.__name__}: signature {signature_} does not declare "
            f"exactly {channel_count} output(s)"
        )
    if has_variadic and not signature_.inputs.is_repeating:
        raise SignatureError(
            f"{cls.__name__}: variadic parameter needs repeating inputs, "
            f"got {signature_}"
        )
    if not signature_.inputs.admits(scalar_count):
        raise SignatureError(
            f"{cls.__name__}: {scalar_count} parameter(s) do not fit {signature_}"
        )


def _process_class(
    cls: type["Opcode"],
    *,
    name: str,
    signatures: tuple[Signature, ...],
    is_multichannel: bool = False,
    channel_count: int = 1,
) -> type["Opcode"]:
    if name in _registry:
        raise SignatureError(f"opcode {name!r} is already declared")
    if not signatures:
        raise SignatureError(f"{cls.__name__} declares no signatures")
    params: dict[str, Param] = {}
    variadic_key: str | None = None
    for key, value in cls.__dict__.items():
        if not isinstance(value, Param):
            continue
        if variadic_key is not None:
            raise SignatureError(
                f"{cls.__name__}: variadic parameter {variadic_key!r} must be last"
            )
        if key in vars(CallNode):
            raise SignatureError(f"{cls.__name__}: parameter {key!r} is reserved")
        params[key] = value
        if value.variadic:
            variadic_key = key
        _add_param_fn(cls, key, len(params) - 1, value.variadic)
    scalar_count = len(params) - (1 if variadic_key else 0)
    for signature_ in signatures:
        _check_signature(
            cls,
            signature_,
            scalar_count,
            variadic_key is not None,
            is_multichannel,
            channel_count,
        )
    _add_new_fn(cls, params, is_multichannel, channel_count)
    cls._name = name
    cls._signatures = signatures
    cls._ordered_keys = tuple(params.keys())
    cls._variadic_key = variadic_key
    cls._is_multichannel = bool(is_multichannel)
    _registry[name] = cls
    return cls


def param(
    default: "Missing | float | str | ConstantProxy" = MISSING,
    *,
    variadic: bool = False,
) -> Param:
    """Define an opcode parameter. Akin to dataclasses.field.

    A ``variadic`` parameter must be declared last; it accepts a (possibly
    nested) sequence of values which is flattened into the argument list.
    """
    return Param(default, variadic)


def opcode(
    name: str,
    *signatures: Signature | tuple[Any, Any],
    is_multichannel: bool = False,
    channel_count: int = 1,
) -> Callable[[type["Opcode"]], type["Opcode"]]:
    """Decorate an Opcode class. Akin to dataclasses.dataclass.

    ``signatures`` is the overload set in priority order. Fixed-arity opcodes
    declare ``channel_count`` outputs (0 for effects); multichannel opcodes
    declare repeating outputs and take ``channel_count`` per call.
    Declaration errors raise ``SignatureError`` immediately.
    """
    if channel_count < 0 or (is_multichannel and channel_count < 1):
        raise SignatureError(f"invalid channel count for {name!r}: {channel_count}")
    signatures_ = tuple(
        x if isinstance(x, Signature) else signature(*x) for x in signatures
    )

    def wrap(cls: type[Opcode]) -> type[Opcode]:
        return _process_class(
            cls,
            name=name,
            signatures=signatures_,
            is_multichannel=is_multichannel,
            channel_count=channel_count,
        )

    return wrap


# ---------------------------------------------------------------------------
# Operands
# ---------------------------------------------------------------------------


def _is_constant(expr: object) -> bool:
    return isinstance(expr, SupportsFloat) and not isinstance(
        expr, (OutputProxy, PField)
    )


def _compute_binary_op(
    left: OpcodeInput,
    right: OpcodeInput,
    operator_: BinaryOperator,
    float_operator: Callable[..., Any] | None = None,
) -> "Operand":
    signature_ = select_signature(
        operator_.symbol,
        _BINARY_SIGNATURES,
        (Rate.from_expr(left), Rate.from_expr(right)),
    )
    rate = signature_.outputs.prefix[0]
    if (
        operator_ in (BinaryOperator.DIVISION, BinaryOperator.MODULO)
        and _is_constant(right)
        and float(right) == 0  # type: ignore[arg-type]
    ):
        raise ValueError(f"{operator_.name.lower()} by zero: {left!r}")
    if _is_constant(left) and _is_constant(right) and float_operator is not None:
        return ConstantProxy(float_operator(float(left), float(right)), rate=rate)  # type: ignore[arg-type]
    result: object = None
    if operator_ == BinaryOperator.MULTIPLICATION:
        if left == 0 or right == 0:
            return ConstantProxy(0, rate=rate)
        if left == 1:
            result = right
        elif right == 1:
            result = left
    elif operator_ == BinaryOperator.ADDITION:
        if left == 0:
            result = right
        elif right == 0:
            result = left
    elif operator_ in (BinaryOperator.SUBTRACTION, BinaryOperator.DIVISION):
        if right == (0 if operator_ == BinaryOperator.SUBTRACTION else 1):
            result = left
    if isinstance(result, Operand) and result.rate is rate:
        return result
    node = BinaryOpNode(operator=operator_, signature=signature_, inputs=(left, right))
    return node[0]


def apply_unary(source: OpcodeInput, operator_: UnaryOperator) -> "Operand":
    """Apply an inline converter, resolving its rate like any other opcode."""
    operator_ = UnaryOperator.from_expr(operator_)
    signature_ = select_signature(
        operator_.function_name,
        _UNARY_SIGNATURES[operator_],
        (Rate.from_expr(source),),
    )
    rate = signature_.outputs.prefix[0]
    float_operator = _UNARY_FLOAT_OPERATORS.get(operator_)
    if _is_constant(source) and float_operator is not None:
        return ConstantProxy(float_operator(float(source)), rate=rate)  # type: ignore[arg-type]
    node = UnaryOpNode(operator=operator_, signature=signature_, inputs=(source,))
    return node[0]


class Operable:
    """Mixin for inline arithmetic on rate-tagged values."""

    def __add__(self, expr: OpcodeInput) -> "Operand":
        return _compute_binary_op(
            left=self,  # type: ignore[arg-type]
            right=expr,
            operator_=BinaryOperator.ADDITION,
            float_operator=operator.add,
        )

    def __radd__(self, expr: OpcodeInput) -> "Operand":
        return _compute_binary_op(
            left=expr,
            right=self,  # type: ignore[arg-type]
            operator_=BinaryOperator.ADDITION,
            float_operator=operator.add,
        )

    def __sub__(self, expr: OpcodeInput) -> "Operand":
        return _compute_binary_op(
            left=self,  # type: ignore[arg-type]
            right=expr,
            operator_=BinaryOperator.SUBTRACTION,
            float_operator=operator.sub,
        )

    def __rsub__(self, expr: OpcodeInput) -> "Operand":
        return _compute_binary_op(
            left=expr,
            right=self,  # type: ignore[arg-type]
            operator_=BinaryOperator.SUBTRACTION,
            float_operator=operator.sub,
        )

    def __mul__(self, expr: OpcodeInput) -> "Operand":
        return _compute_binary_op(
            left=self,  # type: ignore[arg-type]
            right=expr,
            operator_=BinaryOperator.MULTIPLICATION,
            float_operator=operator.mul,
        )

    def __rmul__(self, expr: OpcodeInput) -> "Operand":
        return _compute_binary_op(
            left=expr,
            right=self,  # type: ignore[arg-type]
            operator_=BinaryOperator.MULTIPLICATION,
            float_operator=operator.mul,
        )

    def __truediv__(self, expr: OpcodeInput) -> "Operand":
        return _compute_binary_op(
            left=self,  # type: ignore[arg-type]
            right=expr,
            operator_=BinaryOperator.DIVISION,
            float_operator=operator.truediv,
        )

    def __rtruediv__(self, expr: OpcodeInput) -> "Operand":
        return _compute_binary_op(
            left=expr,
            right=self,  # type: ignore[arg-type]
            operator_=BinaryOperator.DIVISION,
            float_operator=operator.truediv,
        )

    def __mod__(self, expr: OpcodeInput) -> "Operand":
        return _compute_binary_op(
            left=self,  # type: ignore[arg-type]
            right=expr,
            operator_=BinaryOperator.MODULO,
            float_operator=operator.mod,
        )

    def __neg__(self) -> "Operand":
        return apply_unary(self, UnaryOperator.NEGATIVE)  # type: ignore[arg-type]


class Operand(Operable):
    """A single rate-tagged value usable as an opcode argument."""

    def __iter__(self) -> Iterator["Operand"]:
        yield self

    @property
    def rate(self) -> Rate:
        raise NotImplementedError


class OutputProxy(Operand):
    """Reference to one output of a call node."""

    def __init__(self, node: "CallNode", index: int) -> None:
        self.node = node
        self.index = index

    def __eq__(self, expr: object) -> bool:
        return (
            isinstance(expr, type(self))
            and self.node is expr.node
            and self.index == expr.index
        )

    def __hash__(self) -> int:
        return hash((type(self), id(self.node), self.index))

    def __repr__(self) -> str:
        return repr(self.node).replace(">", f"[{self.index}]>")

    @property
    def rate(self) -> Rate:
        return self.node.output_rates[self.index]


class ConstantProxy(Operand):
    """A numeric constant tagged with the rate it should be passed as."""

    def __init__(self, value: SupportsFloat, rate: Rate = Rate.INIT) -> None:
        rate_ = Rate.from_expr(rate)
        if rate_ not in (Rate.INIT, Rate.CONTROL, Rate.AUDIO):
            raise ValueError(f"constants cannot be tagged {rate_.name}")
        self.value = float(value)
        self._rate = rate_

    def __eq__(self, expr: object) -> bool:
        if isinstance(expr, SupportsFloat):
            return float(self) == float(expr)
        return False

    def __float__(self) -> float:
        return self.value

    def __hash__(self) -> int:
        return hash(self.value)

    def __repr__(self) -> str:
        return f"<{self._rate.token}:{self.value}>"

    @property
    def rate(self) -> Rate:
        return self._rate


class PField(Operand):
    """An init-rate instrument parameter (``p4`` onward)."""

    def __init__(self, number: int, name: str | None = None, default: float = 0.0):
        self.number = number
        self.name = name
        self.default = float(default)

    def __repr__(self) -> str:
        return f"<PField.p{self.number}({self.name})>"

    @property
    def rate(self) -> Rate:
        return Rate.INIT


@dataclass(frozen=True)
class FTable:
    """Handle to a function table, passed through as its table number."""

    number: int

    @property
    def rate(self) -> Rate:
        return Rate.INIT


def _flatten_input(key: str, value: object, variadic: bool) -> list[OpcodeInput]:
    if isinstance(value, SequenceABC) and not isinstance(value, str):
        if not variadic:
            raise ValueError(key, value)
        return [x for item in value for x in _flatten_input(key, item, variadic)]
    if isinstance(value, (Operand, FTable, str)):
        return [value]
    if isinstance(value, SupportsFloat):
        return [float(value)]
    raise ValueError(key, value)


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def select_signature(
    name: str,
    signatures: Iterable[Signature],
    rates: Iterable[Rate],
) -> Signature:
    """Return the first signature whose inputs accept ``rates``.

    Declaration order is priority: when several signatures would accept the
    same rates, the earliest one wins.
    """
    rates_ = tuple(rates)
    signatures_ = tuple(signatures)
    for signature_ in signatures_:
        if signature_.inputs.accepts(rates_):
            return signature_
    logger.debug("No overload of %s for rates %s", name, rates_)
    raise OverloadError(name, rates_, signatures_)


def resolve(
    name: str,
    signatures: Iterable[Signature | tuple[Any, Any]],
    args: Iterable[OpcodeInput],
    *,
    channel_count: int | None = None,
) -> "CallNode":
    """Resolve a call of opcode ``name`` and build its call node.

    The rate of each argument is inferred from the value itself. Raises
    ``OverloadError`` without building anything when no signature matches.
    """
    signatures_ = tuple(
        x if isinstance(x, Signature) else signature(*x) for x in signatures
    )
    inputs = [x for arg in args for x in _flatten_input(name, arg, False)]
    signature_ = select_signature(
        name, signatures_, (Rate.from_expr(x) for x in inputs)
    )
    return CallNode(
        name=name,
        signature=signature_,
        inputs=inputs,
        channel_count=channel_count,
    )


def expand(node: "CallNode", arity: int) -> tuple[OutputProxy, ...]:
    """Split a call node into exactly ``arity`` output handles."""
    if arity != len(node):
        raise SignatureError(
            f"{node.name!r} yields {len(node)} output(s), expected {arity}"
        )
    return tuple(node)


# ---------------------------------------------------------------------------
# Call nodes
# ---------------------------------------------------------------------------

# Thread-local storage for active builders
_local = threading.local()
_local._active_builders = []


def _get_active_builder() -> "InstrumentBuilder | None":
    builders = getattr(_local, "_active_builders", None)
    if not builders:
        return None
    return builders[-1]


class CallNode(SequenceABC[OutputProxy]):
    """One resolved opcode invocation."""

    _name = ""
    _signatures: tuple[Signature, ...] = ()
    _ordered_keys: tuple[str, ...] = ()
    _variadic_key: str | None = None
    _is_multichannel = False

    def __init__(
        self,
        *,
        signature: Signature,
        inputs: Iterable[OpcodeInput],
        channel_count: int | None = None,
        name: str | None = None,
    ) -> None:
        self._name = name or type(self)._name
        if not self._name:
            raise ValueError(f"{type(self).__name__} has no opcode name")
        self._signature = signature
        self._inputs = tuple(inputs)
        self._input_rates = tuple(Rate.from_expr(x) for x in self._inputs)
        if not signature.inputs.accepts(self._input_rates):
            raise OverloadError(self._name, self._input_rates, [signature])
        if signature.outputs.is_repeating:
            if channel_count is None or channel_count < 1:
                raise ValueError(
                    f"{self._name!r} needs a positive channel count, got {channel_count}"
                )
            self._output_rates = signature.outputs.slots(channel_count)
        else:
            if channel_count is not None and channel_count != len(
                signature.outputs.prefix
            ):
                raise SignatureError(
                    f"{self._name!r} yields {len(signature.outputs.prefix)} "
                    f"output(s), not {channel_count}"
                )
            self._output_rates = signature.outputs.prefix
        builder = _get_active_builder()
        self._uuid: uuid.UUID | None = builder._uuid if builder else None
        if builder is None and self.is_effect:
            raise InstrumentError(
                f"{self._name!r} has side effects and needs an active InstrumentBuilder"
            )
        for input_ in self._inputs:
            if isinstance(input_, OutputProxy) and input_.node._uuid != self._uuid:
                raise InstrumentError("Opcode input in different scope")
        if builder is not None:
            builder._add_node(self)
        self._values = tuple(
            OutputProxy(node=self, index=i) for i in range(len(self._output_rates))
        )

    @overload
    def __getitem__(self, i: int) -> OutputProxy: ...
    @overload
    def __getitem__(self, i: slice) -> tuple[OutputProxy, ...]: ...
    def __getitem__(
        self, i: int | slice
    ) -> OutputProxy | tuple[OutputProxy, ...]:
        return self._values[i]

    def __iter__(self) -> Iterator[OutputProxy]:
        yield from self._values

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        tokens = "".join(rate.token for rate in self._output_rates)
        return f"<{type(self).__name__}.{tokens or 'se'}({self._name})>"

    @property
    def input_rates(self) -> tuple[Rate, ...]:
        return self._input_rates

    @property
    def inputs(self) -> tuple[OpcodeInput, ...]:
        return self._inputs

    @property
    def is_effect(self) -> bool:
        return not self._output_rates

    @property
    def name(self) -> str:
        return self._name

    @property
    def output_rates(self) -> tuple[Rate, ...]:
        return self._output_rates

    @property
    def signature(self) -> Signature:
        return self._signature


class Opcode(CallNode):
    """Base class for catalogued opcode bindings."""

    @classmethod
    def _collect_inputs(cls, kwargs: dict[str, Any]) -> list[OpcodeInput]:
        inputs: list[OpcodeInput] = []
        for key in cls._ordered_keys:
            if key not in kwargs or isinstance(kwargs[key], Missing):
                raise ValueError(f"{cls.__name__} is missing {key!r}")
            value = kwargs.pop(key)
            inputs.extend(_flatten_input(key, value, key == cls._variadic_key))
        if kwargs:
            raise ValueError(cls.__name__, kwargs)
        return inputs

    @classmethod
    def _new_resolved(
        cls,
        *,
        channel_count: int | None = None,
        **kwargs: OpcodeRecursiveInput,
    ) -> OpcodeOutput:
        inputs = cls._collect_inputs(dict(kwargs))
        signature_ = select_signature(
            cls._name, cls._signatures, (Rate.from_expr(x) for x in inputs)
        )
        node = cls(signature=signature_, inputs=inputs, channel_count=channel_count)
        if len(node) == 1:
            return node[0]
        return node


# ---------------------------------------------------------------------------
# Operator nodes
# ---------------------------------------------------------------------------

_NUMERIC_RATES = (Rate.AUDIO, Rate.CONTROL, Rate.INIT)

_BINARY_SIGNATURES = tuple(
    signature(max(left, right), [left, right])
    for left in _NUMERIC_RATES
    for right in _NUMERIC_RATES
)

_SAME_RATE_SIGNATURES = tuple(signature(rate, [rate]) for rate in _NUMERIC_RATES)

_INIT_OR_CONTROL_SIGNATURES = (
    signature(Rate.CONTROL, [Rate.CONTROL]),
    signature(Rate.INIT, [Rate.INIT]),
)

_UNARY_SIGNATURES: dict[UnaryOperator, tuple[Signature, ...]] = {
    UnaryOperator.NEGATIVE: _SAME_RATE_SIGNATURES,
    UnaryOperator.AMPDB: _SAME_RATE_SIGNATURES,
    UnaryOperator.AMPDBFS: _SAME_RATE_SIGNATURES,
    UnaryOperator.DBAMP: _INIT_OR_CONTROL_SIGNATURES,
    UnaryOperator.DBFSAMP: _INIT_OR_CONTROL_SIGNATURES,
    UnaryOperator.CPSPCH: _INIT_OR_CONTROL_SIGNATURES,
    UnaryOperator.FRACTIONAL_PART: _SAME_RATE_SIGNATURES,
    UnaryOperator.FLOOR: _SAME_RATE_SIGNATURES,
    UnaryOperator.CEILING: _SAME_RATE_SIGNATURES,
    UnaryOperator.INTEGER_PART: _SAME_RATE_SIGNATURES,
    UnaryOperator.ROUND: _SAME_RATE_SIGNATURES,
    UnaryOperator.TO_CONTROL: (signature(Rate.CONTROL, [Rate.INIT]),),
    UnaryOperator.TO_AUDIO: (
        signature(Rate.AUDIO, [Rate.CONTROL]),
        signature(Rate.AUDIO, [Rate.INIT]),
    ),
}

_UNARY_FLOAT_OPERATORS: dict[UnaryOperator, Callable[[float], float]] = {
    UnaryOperator.NEGATIVE: operator.neg,
    UnaryOperator.AMPDB: lambda x: 10 ** (x / 20),
    UnaryOperator.FLOOR: lambda x: float(math.floor(x)),
    UnaryOperator.CEILING: lambda x: float(math.ceil(x)),
    UnaryOperator.INTEGER_PART: lambda x: float(math.trunc(x)),
    UnaryOperator.FRACTIONAL_PART: lambda x: x - math.trunc(x),
}


class UnaryOpNode(CallNode):
    def __init__(
        self,
        *,
        operator: UnaryOperator,
        signature: Signature,
        inputs: Iterable[OpcodeInput],
    ) -> None:
        self._operator = UnaryOperator.from_expr(operator)
        super().__init__(
            name=self._operator.function_name,
            signature=signature,
            inputs=inputs,
        )

    def __repr__(self) -> str:
        return f"<UnaryOpNode.{self.output_rates[0].token}({self.operator.name})>"

    @property
    def operator(self) -> UnaryOperator:
        return self._operator


class BinaryOpNode(CallNode):
    def __init__(
        self,
        *,
        operator: BinaryOperator,
        signature: Signature,
        inputs: Iterable[OpcodeInput],
    ) -> None:
        self._operator = BinaryOperator.from_expr(operator)
        super().__init__(
            name=self._operator.symbol,
            signature=signature,
            inputs=inputs,
        )

    def __repr__(self) -> str:
        return f"<BinaryOpNode.{self.output_rates[0].token}({self.operator.name})>"

    @property
    def operator(self) -> BinaryOperator:
        return self._operator


# ---------------------------------------------------------------------------
# Instrument
# ---------------------------------------------------------------------------


class Instrument:
    """A built, immutable instrument: call nodes in construction order."""

    def __init__(
        self,
        nodes: SequenceABC[CallNode],
        name: str | int | None = None,
        pfields: SequenceABC[PField] = (),
    ) -> None:
        if not nodes:
            raise InstrumentError("No opcodes provided")
        self._nodes = tuple(nodes)
        self._name = name
        self._pfields = tuple(pfields)
        from .compiler import compile_instrument_body

        self._body = compile_instrument_body(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, type(self)):
            return False
        return (self._name, self._body) == (other._name, other._body)

    def __hash__(self) -> int:
        return hash((type(self), self._name, self._body))

    def __repr__(self) -> str:
        return f"<Instrument: {self.effective_name}>"

    def compile(self, options: Any = None, use_anonymous_name: bool = False) -> str:
        from .compiler import compile_instruments

        return compile_instruments(
            self, options=options, use_anonymous_names=use_anonymous_name
        )

    @property
    def anonymous_name(self) -> str:
        return "instr_" + hashlib.md5(self._body.encode("utf-8")).hexdigest()

    @property
    def effective_name(self) -> str | int:
        return self._name if self._name is not None else self.anonymous_name

    @property
    def effects(self) -> tuple[CallNode, ...]:
        return tuple(node for node in self._nodes if node.is_effect)

    @property
    def name(self) -> str | int | None:
        return self._name

    @property
    def nodes(self) -> tuple[CallNode, ...]:
        return self._nodes

    @property
    def pfields(self) -> tuple[PField, ...]:
        return self._pfields


class InstrumentBuilder:
    """Collects call nodes, in construction order, into an Instrument.

    Named p-fields are numbered from ``p4`` in declaration order::

        with InstrumentBuilder(amplitude=0.5) as builder:
            signal = SoundIn.new(filename="loop.wav") * builder["amplitude"]
            OutCh.new(pairs=[(kr(1), signal)])
        instrument = builder.build(name="player")
    """

    def __init__(self, **pfields: float) -> None:
        self._nodes: list[CallNode] = []
        self._pfields: dict[str, PField] = {}
        self._uuid = uuid.uuid4()
        for key, value in pfields.items():
            self.add_pfield(name=key, default=value)

    def __enter__(self) -> "InstrumentBuilder":
        if not hasattr(_local, "_active_builders"):
            _local._active_builders = []
        _local._active_builders.append(self)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: Any,
    ) -> None:
        _local._active_builders.pop()

    def __getitem__(self, item: str) -> PField:
        return self._pfields[item]

    def _add_node(self, node: CallNode) -> None:
        if node._uuid != self._uuid:
            raise InstrumentError("Opcode input in different scope")
        self._nodes.append(node)

    def _optimize(self, nodes: list[CallNode]) -> list[CallNode]:
        while True:
            consumed = {
                input_.node
                for node in nodes
                for input_ in node.inputs
                if isinstance(input_, OutputProxy)
            }
            kept = [node for node in nodes if node.is_effect or node in consumed]
            if len(kept) == len(nodes):
                return kept
            nodes = kept

    def add_pfield(self, *, name: str, default: float = 0.0) -> PField:
        if name in self._pfields:
            raise ValueError(name, default)
        pfield = PField(number=4 + len(self._pfields), name=name, default=default)
        self._pfields[name] = pfield
        return pfield

    def build(self, name: str | int | None = None, optimize: bool = True) -> Instrument:
        nodes = list(self._nodes)
        if optimize:
            nodes = self._optimize(nodes)
        logger.debug(
            "Built instrument %s: %d node(s), %d pruned",
            name,
            len(nodes),
            len(self._nodes) - len(nodes),
        )
        return Instrument(nodes, name=name, pfields=tuple(self._pfields.values()))


def instrument(name: str | int | None = None) -> Callable[..., Instrument]:
    """Decorator for constructing Instruments from functions.

    Every function parameter becomes a p-field, numbered from ``p4``::

        @instrument()
        def player(amplitude=0.5):
            ...

    The function name is used unless ``name`` (a string or instrument
    number) is given.
    """
    import inspect

    def inner(func: Callable[..., Any]) -> Instrument:
        signature_ = inspect.signature(func)
        builder = InstrumentBuilder()
        kwargs: dict[str, PField] = {}
        for key, parameter in signature_.parameters.items():
            default = parameter.default
            if default is inspect.Parameter.empty:
                default = 0.0
            kwargs[key] = builder.add_pfield(name=key, default=default)
        with builder:
            func(**kwargs)
        return builder.build(name=name if name is not None else func.__name__)

    return inner
