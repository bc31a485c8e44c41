import pytest

from app.core.errors import InsufficientStock, UnknownProduct, ValidationError
from app.v1_0.entities import ProductDTO
from app.v1_0.services import InventoryLedger


def stock_of(ledger: InventoryLedger, product_id: str) -> int:
    return ledger.get_product(product_id).stock


def test_set_stock_replaces_quantity(ledger):
    product = ledger.set_stock("1", 3)
    assert product.stock == 3
    assert stock_of(ledger, "1") == 3


def test_set_stock_negative_is_stored_as_zero(ledger):
    ledger.set_stock("1", -5)
    assert stock_of(ledger, "1") == 0


def test_set_stock_unknown_product(ledger):
    with pytest.raises(UnknownProduct) as exc:
        ledger.set_stock("404", 1)
    assert exc.value.product_id == "404"


def test_reserve_decrements(ledger):
    affected = ledger.reserve([("1", 3), ("2", 5)])
    assert [p.id for p in affected] == ["1", "2"]
    assert stock_of(ledger, "1") == 7
    assert stock_of(ledger, "2") == 15


def test_reserve_clamps_oversell_at_zero(ledger):
    ledger.reserve([("1", 20)])
    assert stock_of(ledger, "1") == 0


def test_reserve_reject_policy_leaves_stock_untouched(strict_ledger):
    with pytest.raises(InsufficientStock) as exc:
        strict_ledger.reserve([("2", 1), ("1", 11)])
    assert exc.value.requested == 11
    assert exc.value.available == 10
    assert stock_of(strict_ledger, "1") == 10
    assert stock_of(strict_ledger, "2") == 20


def test_reserve_reject_policy_sums_repeated_lines(strict_ledger):
    with pytest.raises(InsufficientStock):
        strict_ledger.reserve([("6", 3), ("6", 2)])
    assert stock_of(strict_ledger, "6") == 4


def test_reserve_unknown_product_changes_nothing(ledger):
    with pytest.raises(UnknownProduct):
        ledger.reserve([("1", 2), ("99", 1)])
    assert stock_of(ledger, "1") == 10


def test_reserve_rejects_non_positive_quantity(ledger):
    with pytest.raises(ValidationError):
        ledger.reserve([("1", 0)])
    assert stock_of(ledger, "1") == 10


def test_release_increments_without_upper_bound(ledger):
    ledger.release([("6", 100)])
    assert stock_of(ledger, "6") == 104


def test_release_skips_unknown_products(ledger):
    affected = ledger.release([("99", 1), ("1", 2)])
    assert [p.id for p in affected] == ["1"]
    assert stock_of(ledger, "1") == 12


def test_reserve_then_release_is_a_no_op(ledger):
    before = {p.id: p.stock for p in ledger.list_products()}
    lines = [("1", 4), ("2", 20), ("6", 1)]
    ledger.reserve(lines)
    ledger.release(lines)
    assert {p.id: p.stock for p in ledger.list_products()} == before


def test_total_stock_and_can_sell(ledger):
    assert ledger.total_stock() == 34
    assert ledger.can_sell()
    for product in ledger.list_products():
        ledger.set_stock(product.id, 0)
    assert ledger.total_stock() == 0
    assert not ledger.can_sell()


def test_listing_returns_copies(ledger):
    listed = ledger.list_products()
    listed[0].stock = 999
    assert stock_of(ledger, "1") == 10


def test_replace_all_swaps_the_whole_catalog(ledger):
    ledger.replace_all([ProductDTO(id="9", name="Carne", price=60, stock=-3)])
    assert "1" not in ledger
    assert len(ledger) == 1
    assert stock_of(ledger, "9") == 0


def test_unsupported_policy():
    with pytest.raises(ValueError):
        InventoryLedger(oversell_policy="maybe")
