"""
Value model for fixed-point formats under verification.

A fixed-point number is an integer ``raw`` scaled by a constant unit:
``value = raw / one``.  A format fixes the unit (2**64 for the binary
64.64 format, 10**18 for the decimal formats), the backing integer width
and signedness, and therefore the representable interval [min_raw, max_raw].

Each format also carries the operation limits of the libraries that
implement it (largest permitted exp/exp2 argument, largest sqrt input...).
Property checks read these constants; nothing ever writes them.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, localcontext
from fractions import Fraction


@dataclass(frozen=True)
class FixedPointFormat:
    """
    A fixed-point encoding: ``radix ** fractional`` is the unit and the
    raw value lives in a ``width``-bit (un)signed integer.
    """

    name: str
    radix: int
    fractional: int
    width: int
    signed: bool

    # Operation limits, expressed as raw values.  None means unrestricted
    # beyond [min_raw, max_raw].
    max_permitted_exp2: int | None = None
    min_permitted_exp2: int | None = None
    max_permitted_exp: int | None = None
    min_permitted_exp: int | None = None
    max_permitted_sqrt: int | None = None

    def __post_init__(self):
        if self.radix not in (2, 10):
            raise ValueError(f"radix must be 2 or 10, got {self.radix}")
        if self.fractional <= 0 or self.width <= 0:
            raise ValueError("fractional and width must be positive")

    # -- derived constants ------------------------------------------------

    @property
    def one(self) -> int:
        return self.radix ** self.fractional

    @property
    def zero(self) -> int:
        return 0

    @property
    def epsilon(self) -> int:
        """Smallest positive representable value (raw 1)."""
        return 1

    @property
    def min_raw(self) -> int:
        return -(1 << (self.width - 1)) if self.signed else 0

    @property
    def max_raw(self) -> int:
        return (1 << (self.width - 1)) - 1 if self.signed else (1 << self.width) - 1

    @property
    def integer_min(self) -> int:
        """Smallest integer accepted by an integer conversion."""
        if self.radix == 2:
            return self.min_raw >> self.fractional
        return -(-self.min_raw // self.one)

    @property
    def integer_max(self) -> int:
        """Largest integer accepted by an integer conversion."""
        return self.max_raw // self.one if self.radix == 10 else self.max_raw >> self.fractional

    @property
    def precision_bits(self) -> int:
        """Fractional precision expressed in bits (floor for decimal)."""
        return self.one.bit_length() - 1

    def contains(self, raw: int) -> bool:
        return self.min_raw <= raw <= self.max_raw

    def boundary_values(self) -> list[int]:
        """Documented boundary constants fed to every check."""
        candidates = [
            self.min_raw, self.min_raw + 1, -self.one, -1, 0, 1,
            self.one, self.max_raw - 1, self.max_raw,
        ]
        seen: list[int] = []
        for v in candidates:
            if self.contains(v) and v not in seen:
                seen.append(v)
        return seen

    # -- conversions ------------------------------------------------------

    def from_int(self, n: int) -> int:
        """Exact raw encoding of an integer, or ValueError if out of range."""
        if not self.integer_min <= n <= self.integer_max:
            raise ValueError(
                f"{n} is outside [{self.integer_min}, {self.integer_max}] for {self.name}"
            )
        return n * self.one

    def from_decimal(self, text: str | int | Fraction, *, truncate: bool = False) -> int:
        """
        Encode a decimal literal such as ``"3.5"`` or ``"-2.25"``.

        Values that are not exactly representable raise ValueError unless
        ``truncate`` is set, in which case the result rounds toward zero.
        """
        scaled = Fraction(text) * self.one
        if scaled.denominator != 1 and not truncate:
            raise ValueError(f"{text} is not exactly representable in {self.name}")
        raw = int(scaled)
        if not self.contains(raw):
            raise ValueError(f"{text} is outside the range of {self.name}")
        return raw

    def to_decimal(self, raw: int) -> Decimal:
        """Human-readable value of a raw encoding (for reports and traces)."""
        with localcontext() as ctx:
            ctx.prec = 90
            return Decimal(raw) / Decimal(self.one)


@dataclass(frozen=True)
class Fixed:
    """An immutable fixed-point value tied to its format."""

    fmt: FixedPointFormat
    raw: int

    def __post_init__(self):
        if not self.fmt.contains(self.raw):
            raise ValueError(
                f"raw value {self.raw} is outside [{self.fmt.min_raw}, {self.fmt.max_raw}]"
            )

    @classmethod
    def parse(cls, fmt: FixedPointFormat, text: str) -> Fixed:
        return cls(fmt, fmt.from_decimal(text))

    def __str__(self) -> str:
        return f"{self.fmt.to_decimal(self.raw)} ({self.fmt.name})"


# ---------------------------------------------------------------------------
# Format presets
# ---------------------------------------------------------------------------

# log2(e) scaled by 2**128, used to reduce exp to exp2 in the binary format.
LOG2_E_X128 = 0x171547652B82FE1777D0FFDA0D23A7D12

# Signed 64.64 binary fixed point backed by int128.
Q64X64 = FixedPointFormat(
    name="q64x64",
    radix=2,
    fractional=64,
    width=128,
    signed=True,
    max_permitted_exp2=(63 << 64) - 1,
    min_permitted_exp2=-0x400000000000000000,
    max_permitted_exp=-(-(63 << 192) // LOG2_E_X128) - 1,
    min_permitted_exp=-0x400000000000000000,
)

# Signed 59.18 decimal fixed point backed by int256.
SD59X18 = FixedPointFormat(
    name="sd59x18",
    radix=10,
    fractional=18,
    width=256,
    signed=True,
    max_permitted_exp2=192 * 10**18 - 1,
    min_permitted_exp2=-59_794705707972522261,
    max_permitted_exp=133_084258667509499440,
    min_permitted_exp=-41_446531673892822322,
    max_permitted_sqrt=((1 << 255) - 1) // 10**18,
)

# Unsigned 60.18 decimal fixed point backed by uint256.
UD60X18 = FixedPointFormat(
    name="ud60x18",
    radix=10,
    fractional=18,
    width=256,
    signed=False,
    max_permitted_exp2=192 * 10**18 - 1,
    max_permitted_exp=133_084258667509499440,
    max_permitted_sqrt=((1 << 256) - 1) // 10**18,
)

FORMATS = {fmt.name: fmt for fmt in (Q64X64, SD59X18, UD60X18)}
