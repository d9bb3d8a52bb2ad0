# Overview: Financial summaries over invoices, expenses and products.

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from ..models import STATUS_CANCELLED, STATUS_PAID, STATUS_PENDING, Expense, Invoice, Product
from ..time_utils import parse_iso_date, utcnow
from ..validation import require_choice

RANGE_MONTH = "month"
RANGE_YEAR = "year"
RANGE_ALL = "all"
DATE_RANGES = (RANGE_MONTH, RANGE_YEAR, RANGE_ALL)

TOP_PRODUCTS_LIMIT = 5


def _range_start(date_range: str, today: date) -> Optional[date]:
    if date_range == RANGE_MONTH:
        return today.replace(day=1)
    if date_range == RANGE_YEAR:
        return today.replace(month=1, day=1)
    return None


def _in_range(value: str, start: Optional[date]) -> bool:
    if start is None:
        return True
    try:
        parsed = parse_iso_date(value)
    except ValueError:
        return False
    return parsed is not None and parsed >= start


def financial_summary(
    invoices: Iterable[Invoice],
    expenses: Iterable[Expense],
    products: Iterable[Product],
    *,
    date_range: str = RANGE_MONTH,
    today: Optional[date] = None,
) -> dict:
    """
    Sales vs. expenses for the period.

    Cancelled invoices are left out. Amounts are added as stored, without
    converting between currencies. The cost-of-sales expense of a cancelled
    invoice still counts, since cancellation does not remove it.
    """
    require_choice("range", date_range, DATE_RANGES)
    start = _range_start(date_range, today or utcnow().date())

    period_invoices = [i for i in invoices if i.status != STATUS_CANCELLED and _in_range(i.date, start)]
    period_expenses = [e for e in expenses if _in_range(e.date, start)]

    total_sales = sum((i.total for i in period_invoices), 0.0)
    total_expenses = sum((e.amount for e in period_expenses), 0.0)
    net_profit = total_sales - total_expenses
    profit_margin = (net_profit / total_sales) * 100 if total_sales > 0 else 0.0

    quantities: dict[str, int] = {}
    for invoice in period_invoices:
        for item in invoice.items:
            quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity

    names = {p.id: p.name for p in products}
    top_products = sorted(
        ({"product_id": pid, "name": names.get(pid, "Desconocido"), "quantity": qty} for pid, qty in quantities.items()),
        key=lambda row: row["quantity"],
        reverse=True,
    )[:TOP_PRODUCTS_LIMIT]

    by_category: dict[str, float] = {}
    for expense in period_expenses:
        by_category[expense.category] = by_category.get(expense.category, 0.0) + expense.amount

    return {
        "range": date_range,
        "start_date": start.isoformat() if start else None,
        "invoice_count": len(period_invoices),
        "expense_count": len(period_expenses),
        "total_sales": total_sales,
        "total_expenses": total_expenses,
        "net_profit": net_profit,
        "profit_margin": profit_margin,
        "top_products": top_products,
        "expenses_by_category": [{"category": k, "amount": v} for k, v in by_category.items()],
    }


def dashboard_stats(invoices: Iterable[Invoice], products: Iterable[Product], *, low_stock_threshold: int = 5) -> dict:
    invoices = list(invoices)
    return {
        "total_revenue": sum((i.total for i in invoices), 0.0),
        "paid_invoices": sum(1 for i in invoices if i.status == STATUS_PAID),
        "pending_invoices": sum(1 for i in invoices if i.status == STATUS_PENDING),
        "low_stock_count": sum(1 for p in products if p.stock < low_stock_threshold),
    }
