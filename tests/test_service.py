"""Tests for the application layer that front-ends talk to."""

from decimal import Decimal

import pytest

from storefront.errors import BackendError, StockConflict, ValidationError
from storefront.models import Product, PurchaseResult
from storefront.service import StoreService

PEN = Product(id=1, name="Pen", price=Decimal("10.0"), stock=5)
MUG = Product(id=2, name="Mug", price=Decimal("50.0"), stock=0)


class FakeBackend:
    """In-memory stand-in for list_products / purchase."""

    def __init__(self, products):
        self.products = {p.id: p for p in products}
        self.fail_reads = False
        self.purchases = []

    def catalog(self, settings):
        if self.fail_reads:
            raise BackendError("connection lost")
        return list(self.products.values())

    def processor(self, settings, product_id, expected):
        self.purchases.append((product_id, expected))
        current = self.products[product_id]
        if current.stock != expected:
            raise StockConflict(product_id, expected, current.stock)
        self.products[product_id] = current.model_copy(update={"stock": expected - 1})
        return PurchaseResult(product_id=product_id, previous_stock=expected, new_stock=expected - 1)


@pytest.fixture
def backend():
    return FakeBackend([PEN, MUG])


@pytest.fixture
def service(settings, backend):
    svc = StoreService(settings, catalog=backend.catalog, processor=backend.processor)
    svc.refresh()
    return svc


class TestRefresh:
    def test_snapshot_starts_empty(self, settings, backend):
        assert StoreService(settings, catalog=backend.catalog).snapshot == ()

    def test_refresh_replaces_snapshot(self, service):
        assert service.snapshot == (PEN, MUG)

    def test_failed_read_keeps_last_snapshot(self, service, backend):
        backend.fail_reads = True
        with pytest.raises(BackendError):
            service.refresh()
        assert service.snapshot == (PEN, MUG)

    def test_find(self, service):
        assert service.find(2) == MUG
        assert service.find(42) is None


class TestBuy:
    def test_success_refreshes(self, service, backend):
        result = service.buy(1, lambda p: True)
        assert result.new_stock == 4
        assert backend.purchases == [(1, 5)]
        assert service.find(1).stock == 4

    def test_confirm_sees_selected_product(self, service):
        seen = []
        service.buy(1, lambda p: seen.append(p) or False)
        assert seen == [PEN]

    def test_declined_makes_no_backend_call(self, service, backend):
        assert service.buy(1, lambda p: False) is None
        assert backend.purchases == []
        assert service.find(1).stock == 5

    def test_out_of_stock_blocked_before_confirm(self, service, backend):
        def confirm(p):
            raise AssertionError("should not ask")

        with pytest.raises(ValidationError, match="out of stock"):
            service.buy(2, confirm)
        assert backend.purchases == []

    def test_no_selection(self, service, backend):
        with pytest.raises(ValidationError, match="select a product"):
            service.buy(None, lambda p: True)
        with pytest.raises(ValidationError):
            service.buy(42, lambda p: True)
        assert backend.purchases == []

    def test_refresh_failure_after_purchase_still_succeeds(self, service, backend):
        original = backend.processor

        def processor_then_outage(settings, product_id, expected):
            result = original(settings, product_id, expected)
            backend.fail_reads = True
            return result

        service.processor = processor_then_outage
        result = service.buy(1, lambda p: True)
        assert result.new_stock == 4
        # stale but intact
        assert service.find(1).stock == 5

    def test_conflict_propagates_and_refreshes(self, service, backend):
        backend.products[1] = PEN.model_copy(update={"stock": 3})
        with pytest.raises(StockConflict):
            service.buy(1, lambda p: True)
        assert service.find(1).stock == 3

    def test_conflict_with_outage_keeps_snapshot(self, service, backend):
        backend.products[1] = PEN.model_copy(update={"stock": 3})
        backend.fail_reads = True
        with pytest.raises(StockConflict):
            service.buy(1, lambda p: True)
        assert service.find(1).stock == 5


def test_against_real_database(mixed_store):
    svc = StoreService(mixed_store)
    svc.refresh()
    svc.buy(1, lambda p: True)
    assert {p.id: p.stock for p in svc.snapshot} == {1: 4, 2: 0, 3: 2}
