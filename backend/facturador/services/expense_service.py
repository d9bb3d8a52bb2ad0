from __future__ import annotations

import uuid
from typing import Optional

from ..models import COST_OF_SALES_CATEGORY, EXPENSES, Expense
from ..models.expenses import EXPENSE_CATEGORIES
from ..storage import DocumentGateway
from ..time_utils import today_iso
from ..validation import NotFoundError, ValidationError, require_choice


def list_expenses(gateway: DocumentGateway, search: Optional[str] = None) -> list[Expense]:
    """Expenses newest first, optionally filtered by provider or description."""
    expenses = [Expense.from_dict(r) for r in gateway.list_all(EXPENSES)]
    if search:
        term = search.strip().lower()
        expenses = [e for e in expenses if term in e.provider.lower() or term in e.description.lower()]
    return sorted(expenses, key=lambda e: e.date, reverse=True)


def add_expense(gateway: DocumentGateway, payload: dict) -> Expense:
    data = dict(payload)
    data["id"] = str(data.get("id") or uuid.uuid4())
    data.setdefault("date", today_iso())

    expense = Expense.from_dict(data)
    if expense.is_cost_of_sales:
        raise ValidationError(f"'{COST_OF_SALES_CATEGORY}' is reserved for invoice-derived expenses")
    require_choice("category", expense.category, EXPENSE_CATEGORIES)

    gateway.upsert(EXPENSES, expense.id, expense.to_dict())
    return expense


def delete_expense(gateway: DocumentGateway, expense_id: str) -> None:
    if gateway.get_one(EXPENSES, expense_id) is None:
        raise NotFoundError(f"Expense {expense_id} not found")
    gateway.delete(EXPENSES, expense_id)


def total_amount(expenses: list[Expense]) -> float:
    # Amounts are summed as stored, whatever their currency
    return sum((e.amount for e in expenses), 0.0)
