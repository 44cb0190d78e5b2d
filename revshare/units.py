"""Mini README: Conversions between whole value units and display strings.

Amounts inside the ledger are integers in the smallest indivisible unit
("wei"); humans read and type them as ether with up to 18 decimals. Both
helpers use ``Decimal`` so no precision is lost on the way through.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, localcontext
from typing import Union

DECIMALS = 18
WEI_PER_ETHER = 10**DECIMALS
SYMBOL = "ETH"


def parse_ether(value: Union[str, int, Decimal]) -> int:
    """Convert an ether amount such as ``"1.5"`` into wei."""

    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation as error:
        raise ValueError(f"Not a valid ether amount: {value!r}") from error
    if not amount.is_finite():
        raise ValueError(f"Not a valid ether amount: {value!r}")
    if amount < 0:
        raise ValueError("Ether amounts must not be negative")
    with localcontext() as context:
        context.prec = 80
        wei = amount.scaleb(DECIMALS)
        if wei != wei.to_integral_value():
            raise ValueError(f"Too many decimal places (max {DECIMALS}): {value!r}")
        return int(wei)


def format_ether(wei: int) -> str:
    """Render wei as ether, keeping at least one fractional digit."""

    if wei < 0:
        raise ValueError("Wei amounts must not be negative")
    whole, fraction = divmod(wei, WEI_PER_ETHER)
    if fraction == 0:
        return f"{whole}.0"
    digits = str(fraction).rjust(DECIMALS, "0").rstrip("0")
    return f"{whole}.{digits}"
