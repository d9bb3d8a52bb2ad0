from .documents import DocumentRecord
from .inventory import Product
from .customers import Customer
from .invoices import (
    Invoice,
    InvoiceItem,
    STATUS_PAID,
    STATUS_PENDING,
    STATUS_CANCELLED,
    HACIENDA_ACCEPTED,
    HACIENDA_VOIDED,
)
from .expenses import Expense, COST_OF_SALES_CATEGORY
from .settings import AppSettings, HaciendaConfig, SETTINGS_RECORD_ID, FALLBACK_EXCHANGE_RATE

# Collection names shared by every document store.
PRODUCTS = "products"
CUSTOMERS = "customers"
INVOICES = "invoices"
EXPENSES = "expenses"
SETTINGS = "settings"
COLLECTIONS = (PRODUCTS, CUSTOMERS, INVOICES, EXPENSES, SETTINGS)

__all__ = [
    'DocumentRecord',
    'Product', 'Customer',
    'Invoice', 'InvoiceItem',
    'STATUS_PAID', 'STATUS_PENDING', 'STATUS_CANCELLED',
    'HACIENDA_ACCEPTED', 'HACIENDA_VOIDED',
    'Expense', 'COST_OF_SALES_CATEGORY',
    'AppSettings', 'HaciendaConfig', 'SETTINGS_RECORD_ID', 'FALLBACK_EXCHANGE_RATE',
    'PRODUCTS', 'CUSTOMERS', 'INVOICES', 'EXPENSES', 'SETTINGS', 'COLLECTIONS',
]
