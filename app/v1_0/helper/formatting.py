from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
from zoneinfo import ZoneInfo

CURRENCY_SYMBOLS = {"BRL": "R$", "USD": "US$", "EUR": "€"}


def format_price(value: Decimal | int | float, currency: str = "BRL") -> str:
    """pt-BR currency format: ``R$ 1.234,50``."""
    amount = Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    integer, _, cents = f"{abs(amount):.2f}".partition(".")
    groups = []
    while len(integer) > 3:
        groups.insert(0, integer[-3:])
        integer = integer[:-3]
    groups.insert(0, integer)
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), currency.upper())
    return f"{sign}{symbol} {'.'.join(groups)},{cents}"


def format_datetime(value: datetime, tz: Optional[str] = None) -> str:
    """pt-BR short date-time: ``dd/mm/yyyy HH:MM``."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    if tz:
        value = value.astimezone(ZoneInfo(tz))
    return value.strftime("%d/%m/%Y %H:%M")
