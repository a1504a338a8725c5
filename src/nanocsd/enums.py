"""Enum types for nanocsd."""

import enum
from typing import SupportsFloat, SupportsInt, cast


class Rate(enum.IntEnum):
    """Csound signal rate.

    Classifies how often a value is updated and what kind of value it is:

    - ``INIT`` (0) -- computed once when the instrument is initialized
      (``i`` variables and numeric constants).
    - ``CONTROL`` (1) -- computed once per control block of ``ksmps``
      samples (``k`` variables).
    - ``AUDIO`` (2) -- computed every sample (``a`` variables).
    - ``STRING`` (3) -- a string value (``S`` variables and string literals).
    - ``SIGNAL`` (4) -- wildcard slot accepting either ``AUDIO`` or
      ``CONTROL`` arguments (Csound's ``x`` prefix).
    - ``ANY`` (5) -- wildcard slot accepting every rate, strings included.

    ``SIGNAL`` and ``ANY`` only ever appear in declared input slots; a
    concrete value always carries one of the first four rates. Among the
    numeric rates, ordering follows update frequency, so ``max()`` of
    operand rates is the rate of an arithmetic result.
    """

    INIT = 0
    CONTROL = 1
    AUDIO = 2
    STRING = 3
    SIGNAL = 4
    ANY = 5

    @classmethod
    def from_expr(cls, expr: object) -> "Rate":
        """Infer the rate of an operand.

        Rate instances pass through, objects exposing a ``rate`` attribute
        report it, Python strings are ``STRING`` and numbers are ``INIT``.
        """
        if expr is None:
            return cls.INIT
        if isinstance(expr, cls):
            return expr
        if hasattr(expr, "rate"):
            return cast("Rate", expr.rate)
        if isinstance(expr, str):
            return cls.STRING
        if isinstance(expr, (int, float, SupportsFloat)):
            return cls.INIT
        raise ValueError(expr)

    @classmethod
    def from_token(cls, token: str) -> "Rate":
        """Look up a rate by its Csound prefix (``"a"``, ``"k"``, ``"i"``...)."""
        for rate in cls:
            if rate.token == token:
                return rate
        return cls[token.upper()]

    def accepts(self, rate: "Rate") -> bool:
        """Whether an argument of ``rate`` may fill a slot declared as ``self``."""
        if self is Rate.ANY:
            return True
        if self is Rate.SIGNAL:
            return rate in (Rate.AUDIO, Rate.CONTROL)
        return self is rate

    @property
    def is_wildcard(self) -> bool:
        return self in (Rate.SIGNAL, Rate.ANY)

    @property
    def token(self) -> str:
        return {0: "i", 1: "k", 2: "a", 3: "S", 4: "x", 5: "*"}[self.value]


class BinaryOperator(enum.IntEnum):
    """Inline arithmetic operators available in orchestra expressions."""

    ADDITION = 0
    SUBTRACTION = 1
    MULTIPLICATION = 2
    DIVISION = 3
    MODULO = 4

    @classmethod
    def from_expr(cls, expr: object) -> "BinaryOperator":
        if isinstance(expr, cls):
            return expr
        return cls(int(cast(SupportsInt, expr)))

    @property
    def symbol(self) -> str:
        return {0: "+", 1: "-", 2: "*", 3: "/", 4: "%"}[self.value]


class UnaryOperator(enum.IntEnum):
    """Inline value converters available in orchestra expressions.

    Each member renders as a Csound function call, e.g. ``ampdb(k1)``, except
    ``NEGATIVE`` which renders as a prefix minus. ``TO_CONTROL`` and
    ``TO_AUDIO`` are Csound's ``k()`` and ``a()`` rate casts.
    """

    NEGATIVE = 0
    AMPDB = 1
    AMPDBFS = 2
    DBAMP = 3
    DBFSAMP = 4
    CPSPCH = 5
    FRACTIONAL_PART = 6
    FLOOR = 7
    CEILING = 8
    INTEGER_PART = 9
    ROUND = 10
    TO_CONTROL = 11
    TO_AUDIO = 12

    @classmethod
    def from_expr(cls, expr: object) -> "UnaryOperator":
        if isinstance(expr, cls):
            return expr
        if isinstance(expr, str):
            return cls[expr.upper()]
        return cls(int(cast(SupportsInt, expr)))

    @property
    def function_name(self) -> str:
        return {
            0: "-",
            1: "ampdb",
            2: "ampdbfs",
            3: "dbamp",
            4: "dbfsamp",
            5: "cpspch",
            6: "frac",
            7: "floor",
            8: "ceil",
            9: "int",
            10: "round",
            11: "k",
            12: "a",
        }[self.value]
