import pytest

from conftest import make_item, make_product, put_customer, put_product, stock_of

from facturador.models import EXPENSES, Customer, HACIENDA_ACCEPTED, SETTINGS, SETTINGS_RECORD_ID, STATUS_CANCELLED
from facturador.services import invoice_service
from facturador.services.invoice_service import CONSECUTIVE_PREFIX, compose_invoice, price_lines
from facturador.services.ledger_service import LedgerError
from facturador.services.pricing_service import InsufficientStockError
from facturador.validation import ConflictError, NotFoundError, ValidationError


@pytest.fixture
def catalog(store):
    store.upsert(SETTINGS, SETTINGS_RECORD_ID, {"tax_rate": 13, "exchange_rate": 500, "currency": "CRC"})
    put_product(store, make_product(id="A", price=100, currency="USD", cost=60, stock=10))
    put_product(store, make_product(id="S", name="Instalación", price=15000, currency="CRC", cost=0, stock=0))
    put_customer(store)
    return store


# =============================================================================
# PRICING LINES
# =============================================================================


class TestPriceLines:
    def test_lines_for_same_product_share_stock(self, settings):
        products = [make_product(stock=5)]
        lines = [{"product_id": "A", "quantity": 3}, {"product_id": "A", "quantity": 3}]

        with pytest.raises(InsufficientStockError) as exc_info:
            price_lines(lines, products, invoice_currency="CRC", settings=settings)

        assert exc_info.value.details["on_hand"] == 2

    def test_service_lines_do_not_reserve_stock(self, settings):
        products = [make_product(stock=2)]
        lines = [
            {"product_id": "A", "quantity": 9, "is_service": True},
            {"product_id": "A", "quantity": 2},
        ]

        items = price_lines(lines, products, invoice_currency="CRC", settings=settings)

        assert [i.quantity for i in items] == [9, 2]

    def test_unknown_product_rejected(self, settings):
        with pytest.raises(ValidationError):
            price_lines([{"product_id": "nope", "quantity": 1}], [], invoice_currency="CRC", settings=settings)

    def test_line_must_be_an_object(self, settings):
        with pytest.raises(ValidationError):
            price_lines(["A"], [make_product()], invoice_currency="CRC", settings=settings)


# =============================================================================
# COMPOSITION
# =============================================================================


class TestComposeInvoice:
    def _compose(self, settings, **overrides):
        kwargs = dict(
            customer=Customer(id="1", name="Juan Pérez"),
            items=[make_item("A", 2, price=100)],
            settings=settings,
            currency="CRC",
            date="2026-10-01",
            now_millis=1760000123456,
        )
        kwargs.update(overrides)
        return compose_invoice(**kwargs)

    def test_numbers_derive_from_timestamp(self, settings):
        invoice = self._compose(settings)

        assert invoice.number == "FAC-123456"
        assert invoice.consecutive == CONSECUTIVE_PREFIX + "123456"
        assert len(invoice.consecutive) == 21
        assert invoice.electronic_key == "506176000012345612345678"
        assert invoice.hacienda_status == HACIENDA_ACCEPTED

    def test_totals_and_rate_snapshot(self, settings):
        settings.exchange_rate = 0
        invoice = self._compose(settings)

        assert invoice.subtotal == 200
        assert invoice.tax == pytest.approx(26)
        assert invoice.total == pytest.approx(226)
        assert invoice.exchange_rate == 520

    def test_due_date_defaults_to_seven_days(self, settings):
        assert self._compose(settings, date="2026-12-28").due_date == "2027-01-04"

    def test_requires_items(self, settings):
        with pytest.raises(ValidationError):
            self._compose(settings, items=[])

    def test_rejects_bad_dates(self, settings):
        with pytest.raises(ValidationError):
            self._compose(settings, date="01/10/2026")

    def test_rejects_cancelled_as_initial_status(self, settings):
        with pytest.raises(ValidationError):
            self._compose(settings, status=STATUS_CANCELLED)


# =============================================================================
# SUBMIT / VOID
# =============================================================================


class TestSubmitInvoice:
    def test_usd_product_on_colon_invoice(self, catalog):
        commit = invoice_service.submit_invoice(
            catalog,
            {"customer_id": "1", "currency": "CRC", "items": [{"product_id": "A", "quantity": 2}]},
        )

        invoice = commit.invoice
        assert invoice.items[0].price == 50000
        assert invoice.subtotal == 100000
        assert invoice.tax == pytest.approx(13000)
        assert invoice.total == pytest.approx(113000)
        assert invoice.exchange_rate == 500
        assert invoice.customer_name == "Juan Pérez"
        assert stock_of(catalog, "A") == 8

        expenses = catalog.list_all(EXPENSES)
        assert len(expenses) == 1
        assert expenses[0]["amount"] == 120
        assert expenses[0]["currency"] == "CRC"

    def test_insufficient_stock_writes_nothing(self, catalog):
        with pytest.raises(InsufficientStockError):
            invoice_service.submit_invoice(
                catalog, {"customer_id": "1", "items": [{"product_id": "A", "quantity": 11}]},
            )

        assert stock_of(catalog, "A") == 10
        assert invoice_service.list_invoices(catalog) == []

    def test_unknown_customer_rejected(self, catalog):
        with pytest.raises(ValidationError):
            invoice_service.submit_invoice(
                catalog, {"customer_id": "99", "items": [{"product_id": "A", "quantity": 1}]},
            )

    def test_service_line_on_empty_stock(self, catalog):
        commit = invoice_service.submit_invoice(
            catalog,
            {"customer_id": "1", "items": [{"product_id": "S", "quantity": 3, "is_service": True}]},
        )

        assert commit.invoice.total == pytest.approx(45000 * 1.13)
        assert stock_of(catalog, "S") == 0
        assert catalog.list_all(EXPENSES) == []


class TestVoidInvoice:
    def test_void_then_refuse_second_cancel(self, catalog):
        commit = invoice_service.submit_invoice(
            catalog, {"customer_id": "1", "items": [{"product_id": "A", "quantity": 3}]},
        )
        invoice_id = commit.invoice.id

        invoice_service.void_invoice(catalog, invoice_id)
        assert stock_of(catalog, "A") == 10
        assert invoice_service.get_invoice(catalog, invoice_id).is_cancelled

        with pytest.raises(ConflictError):
            invoice_service.void_invoice(catalog, invoice_id)
        assert stock_of(catalog, "A") == 10

    def test_void_unknown_invoice(self, catalog):
        with pytest.raises(NotFoundError):
            invoice_service.void_invoice(catalog, "nope")

    def test_void_keeps_cost_of_sales(self, catalog):
        commit = invoice_service.submit_invoice(
            catalog, {"customer_id": "1", "items": [{"product_id": "A", "quantity": 1}]},
        )
        invoice_service.void_invoice(catalog, commit.invoice.id)
        assert len(catalog.list_all(EXPENSES)) == 1


def test_list_invoices_newest_first_with_status_filter(catalog):
    for day in ("2026-10-01", "2026-10-03", "2026-10-02"):
        invoice_service.submit_invoice(
            catalog, {"customer_id": "1", "date": day, "items": [{"product_id": "A", "quantity": 1}]},
        )
    newest = invoice_service.list_invoices(catalog)[0]
    invoice_service.void_invoice(catalog, newest.id)

    assert [i.date for i in invoice_service.list_invoices(catalog)] == ["2026-10-03", "2026-10-02", "2026-10-01"]
    assert [i.date for i in invoice_service.list_invoices(catalog, status=STATUS_CANCELLED)] == ["2026-10-03"]


def test_ledger_errors_propagate_from_submit(catalog, monkeypatch):
    def reject(*args, **kwargs):
        raise LedgerError("Failed to commit invoice")

    monkeypatch.setattr(invoice_service.ledger_service, "create_invoice", reject)

    with pytest.raises(LedgerError):
        invoice_service.submit_invoice(
            catalog, {"customer_id": "1", "items": [{"product_id": "A", "quantity": 1}]},
        )
