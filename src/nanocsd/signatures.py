"""
Rate sequences and opcode signatures.

An opcode's overload set is a tuple of ``Signature`` values, each pairing the
rates of its outputs with the rates of its inputs. Input sequences are built
from a few combinators so that variable-length argument lists stay terse::

    signature(Rate.AUDIO, exactly(5, Rate.CONTROL) + exactly(5, Rate.INIT))
    signature((), prefix_then_repeating([Rate.STRING, Rate.INIT], Rate.AUDIO))
    signature((), repeating(Rate.CONTROL, Rate.AUDIO))
"""

import itertools
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import NamedTuple, Union

from .enums import Rate


class SignatureError(Exception):
    """A malformed signature or opcode declaration."""

    pass


@dataclass(frozen=True)
class RateSequence:
    """A finite prefix of rate slots followed by an optional repeating cycle.

    An empty ``cycle`` means the sequence is finite. A non-empty cycle repeats
    indefinitely after the prefix; arguments matched against it must fill a
    whole number of cycles.
    """

    prefix: tuple[Rate, ...] = ()
    cycle: tuple[Rate, ...] = ()

    def __post_init__(self) -> None:
        for rate in (*self.prefix, *self.cycle):
            if not isinstance(rate, Rate):
                raise SignatureError(f"not a rate: {rate!r}")

    def __add__(self, other: "RateSequenceInput") -> "RateSequence":
        if self.cycle:
            raise SignatureError(
                f"cannot extend {self}: repeating slots must come last"
            )
        other_ = as_sequence(other)
        return RateSequence(prefix=self.prefix + other_.prefix, cycle=other_.cycle)

    def __radd__(self, other: "RateSequenceInput") -> "RateSequence":
        return as_sequence(other) + self

    def __str__(self) -> str:
        text = "".join(rate.token for rate in self.prefix)
        if self.cycle:
            text += "[" + "".join(rate.token for rate in self.cycle) + "]..."
        return text or "-"

    @property
    def is_repeating(self) -> bool:
        return bool(self.cycle)

    @property
    def rates(self) -> tuple[Rate, ...]:
        return self.prefix + self.cycle

    def admits(self, count: int) -> bool:
        """Whether ``count`` arguments can be aligned against this sequence."""
        if count < len(self.prefix):
            return False
        if not self.cycle:
            return count == len(self.prefix)
        return (count - len(self.prefix)) % len(self.cycle) == 0

    def accepts(self, rates: Sequence[Rate]) -> bool:
        """Whether every rate in ``rates`` fits its aligned slot."""
        if not self.admits(len(rates)):
            return False
        return all(
            slot.accepts(rate) for slot, rate in zip(self.slots(len(rates)), rates)
        )

    def slots(self, count: int) -> tuple[Rate, ...]:
        """Expand the sequence to exactly ``count`` slots."""
        if not self.admits(count):
            raise ValueError(f"{self} cannot hold {count} slots")
        return tuple(
            itertools.islice(
                itertools.chain(self.prefix, itertools.cycle(self.cycle)), count
            )
        )


RateSequenceInput = Union[Rate, RateSequence, Iterable[Rate]]


class Signature(NamedTuple):
    """One valid combination of output rates and input rates for an opcode."""

    outputs: RateSequence
    inputs: RateSequence

    def __str__(self) -> str:
        return f"{self.outputs} <- {self.inputs}"


def as_sequence(value: RateSequenceInput) -> RateSequence:
    """Coerce a rate, an iterable of rates or a sequence to a RateSequence."""
    if isinstance(value, RateSequence):
        return value
    if isinstance(value, Rate):
        return RateSequence(prefix=(value,))
    if isinstance(value, Iterable) and not isinstance(value, str):
        return RateSequence(prefix=tuple(value))
    raise SignatureError(f"not a rate sequence: {value!r}")


def exactly(count: int, rate: Rate) -> RateSequence:
    """``count`` copies of the same slot."""
    if count < 0:
        raise SignatureError(f"slot count must be non-negative, got {count}")
    return RateSequence(prefix=(rate,) * count)


def repeating(*rates: Rate) -> RateSequence:
    """An unbounded tail repeating ``rates`` in order."""
    if not rates:
        raise SignatureError("repeating() needs at least one rate")
    return RateSequence(cycle=tuple(rates))


def prefix_then_repeating(prefix: RateSequenceInput, *rates: Rate) -> RateSequence:
    """A finite prefix followed by an unbounded tail repeating ``rates``."""
    return as_sequence(prefix) + repeating(*rates)


def signature(outputs: RateSequenceInput, inputs: RateSequenceInput) -> Signature:
    """Build a validated Signature.

    Outputs may be empty (an effect), a finite list of concrete rates, or a
    pure repetition (one output per channel, chosen per call). Wildcard
    rates are only meaningful for inputs.
    """
    outputs_ = as_sequence(outputs)
    inputs_ = as_sequence(inputs)
    if any(rate.is_wildcard for rate in outputs_.rates):
        raise SignatureError(f"output rates must be concrete: {outputs_}")
    if outputs_.prefix and outputs_.cycle:
        raise SignatureError(
            f"variable output counts must repeat from the first output: {outputs_}"
        )
    return Signature(outputs=outputs_, inputs=inputs_)
