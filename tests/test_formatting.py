from datetime import datetime, timezone
from decimal import Decimal

import pytest

from app.v1_0.helper.formatting import format_datetime, format_price


@pytest.mark.parametrize(
    "value, expected",
    [
        (Decimal("1234.5"), "R$ 1.234,50"),
        (Decimal("7"), "R$ 7,00"),
        (0, "R$ 0,00"),
        (Decimal("1234567.891"), "R$ 1.234.567,89"),
        (Decimal("-5.5"), "-R$ 5,50"),
    ],
)
def test_format_price(value, expected):
    assert format_price(value) == expected


def test_format_price_other_currency():
    assert format_price(Decimal("10"), "usd") == "US$ 10,00"


def test_format_datetime_in_display_timezone():
    value = datetime(2024, 6, 1, 15, 5, tzinfo=timezone.utc)
    assert format_datetime(value, "America/Sao_Paulo") == "01/06/2024 12:05"
    assert format_datetime(value) == "01/06/2024 15:05"


def test_format_naive_datetime_is_treated_as_utc():
    assert format_datetime(datetime(2024, 1, 2, 3, 4), "UTC") == "02/01/2024 03:04"
