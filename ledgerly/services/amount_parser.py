import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

from ledgerly.config import MINOR_UNIT_EXPONENT


def to_minor_units(
    value: Union[Decimal, int, str], exponent: int = MINOR_UNIT_EXPONENT
) -> int:
    """
    Convert a major-unit amount (e.g. dollars) to integer minor units (cents).

    Fractions of a minor unit are rounded half up, so "10.005" -> 1001.
    Floats are not accepted; pass a string or Decimal instead.
    """
    if isinstance(value, float):
        raise TypeError("Use a string or Decimal, not float, for money values")
    scaled = Decimal(value).scaleb(exponent)
    return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def from_minor_units(amount: int, exponent: int = MINOR_UNIT_EXPONENT) -> Decimal:
    """Convert integer minor units back to an exact major-unit Decimal."""
    return Decimal(amount).scaleb(-exponent)


class AmountParser:
    """
    Parser for amounts typed by a person, producing integer minor units.

    Supports:
    - Currency symbols and codes around the number: $12.50, 12.50 USD
    - Thousand separators: 1,234.56 and 1.234,56
    - Suffixes: k (thousand), m/mil (million), b (billion)
    - Mixed formats: 1.5k = 1500.00
    """

    # Multiplier patterns (case-insensitive)
    MULTIPLIERS = {
        "k": 1_000,
        "m": 1_000_000,
        "mil": 1_000_000,
        "million": 1_000_000,
        "b": 1_000_000_000,
        "billion": 1_000_000_000,
    }

    # Matches: 16k, 1.5mil, 1,000.50, 12, etc.
    # Uses negative lookbehind to avoid matching numbers within words like "account1"
    AMOUNT_PATTERN = re.compile(
        r"""
        (?<![a-zA-Z])                           # Not preceded by a letter
        (?P<number>
            \d{1,3}(?:[.,]\d{3})+(?:[.,]\d+)?  # Numbers with thousand separators
            |
            \d+(?:[.,]\d+)?                     # Simple numbers with optional decimal
        )
        \s*
        (?P<suffix>k|mil|million|m|billion|b)?
        (?![a-zA-Z])                            # Not followed by a letter
        """,
        re.VERBOSE | re.IGNORECASE,
    )

    @classmethod
    def parse(
        cls, text: str, exponent: int = MINOR_UNIT_EXPONENT
    ) -> Optional[int]:
        """
        Parse an amount string into minor units.

        Args:
            text: String containing an amount (e.g., "$5,000", "12.99", "1.5k")
            exponent: Number of minor-unit digits for the currency

        Returns:
            Amount in minor units, or None if no amount is present or it is negative
        """
        if not text:
            return None

        match = cls.AMOUNT_PATTERN.search(text)
        if not match:
            return None

        # Negative amounts: "-5", "$-5", "USD -12"
        if "-" in text[: match.start()]:
            return None

        number = cls._parse_number(match.group("number"))
        if number is None:
            return None

        suffix = match.group("suffix")
        if suffix:
            number *= cls.MULTIPLIERS.get(suffix.lower(), 1)

        return to_minor_units(number, exponent)

    @classmethod
    def _parse_number(cls, number_str: str) -> Optional[Decimal]:
        """
        Parse a number string handling various separator conventions.

        Handles:
        - Western format: 52,500.00 (comma as thousand, dot as decimal)
        - European format: 52.500,00 (dot as thousand, comma as decimal)
        - Simple: 52500, 52.5
        """
        if not number_str:
            return None

        dots = number_str.count(".")
        commas = number_str.count(",")

        if dots > 0 and commas > 0:
            # Whichever separator comes last is the decimal mark
            if number_str.rfind(".") > number_str.rfind(","):
                normalized = number_str.replace(",", "")
            else:
                normalized = number_str.replace(".", "").replace(",", ".")
        elif dots > 1:
            normalized = number_str.replace(".", "")
        elif commas > 1:
            normalized = number_str.replace(",", "")
        elif commas == 1:
            parts = number_str.split(",")
            if len(parts[1]) == 3:
                # Thousand separator
                normalized = number_str.replace(",", "")
            else:
                # European decimal format
                normalized = number_str.replace(",", ".")
        else:
            normalized = number_str

        try:
            return Decimal(normalized)
        except InvalidOperation:
            return None
