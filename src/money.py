import re
from dataclasses import dataclass

from errors import MoneyOverflowError, MoneyParseError, MoneyRangeError, MoneyUnderflowError

PRECISION = 4
SCALE = 10 ** PRECISION
MAX_UNITS = 2 ** 64 - 1

_AMOUNT_PATTERN = re.compile(r"^([0-9]+)(?:\.([0-9]*))?$")
MAX_WHOLE_DIGITS = len(str(MAX_UNITS // SCALE))


@dataclass(frozen=True, order=True)
class Money:
    """
    Non-negative fixed-point amount with four fractional digits.
    Stored as an integer count of 1/10000ths, bounded by MAX_UNITS.
    """

    units: int = 0

    def __post_init__(self):
        if not 0 <= self.units <= MAX_UNITS:
            raise MoneyRangeError(f"{self.units} units is outside [0, {MAX_UNITS}]")

    @classmethod
    def from_parts(cls, whole: int, fractional: int = 0) -> "Money":
        if not 0 <= fractional < SCALE:
            raise MoneyRangeError(f"fractional part {fractional} is outside [0, {SCALE})")
        if whole < 0:
            raise MoneyRangeError(f"whole part {whole} is negative")
        return cls(whole * SCALE + fractional)

    @classmethod
    def parse(cls, text: str) -> "Money":
        """Parse '12', '12.' or '12.3456'. More than four fractional digits is an error, never rounded."""
        stripped = text.strip()
        match = _AMOUNT_PATTERN.match(stripped)
        if match is None:
            raise MoneyParseError(f"'{text}' is not a non-negative decimal amount")

        whole, fractional = match.group(1), match.group(2) or ""
        if len(fractional) > PRECISION:
            raise MoneyParseError(f"'{text}' has more than {PRECISION} fractional digits")
        if len(whole.lstrip("0")) > MAX_WHOLE_DIGITS:
            raise MoneyParseError(f"'{stripped[:32]}...' exceeds the maximum amount {MAX}")

        try:
            return cls.from_parts(int(whole), int(fractional.ljust(PRECISION, "0")))
        except MoneyRangeError as e:
            raise MoneyParseError(f"'{text}' exceeds the maximum amount {MAX}") from e

    def checked_add(self, other: "Money") -> "Money":
        result = self.units + other.units
        if result > MAX_UNITS:
            raise MoneyOverflowError(f"{self} + {other} exceeds the maximum amount {MAX}")
        return Money(result)

    def checked_sub(self, other: "Money") -> "Money":
        if other.units > self.units:
            raise MoneyUnderflowError(f"{self} - {other} would be negative")
        return Money(self.units - other.units)

    def __str__(self) -> str:
        whole, fractional = divmod(self.units, SCALE)
        return f"{whole}.{fractional:0{PRECISION}d}"

    def __repr__(self) -> str:
        return f"Money({self})"


ZERO = Money(0)
MAX = Money(MAX_UNITS)
