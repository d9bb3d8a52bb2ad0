# Overview: Flask API routes for reports; read-only summaries.

from flask import Blueprint, current_app, jsonify, request

from ..services import catalog_service, expense_service, invoice_service, report_service
from ..storage import get_gateway
from .errors import json_error

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/summary")
def summary_route():
    """
    Sales vs. expenses.

    Query params:
    - range: month | year | all (default month)
    """
    try:
        gateway = get_gateway()
        summary = report_service.financial_summary(
            invoice_service.list_invoices(gateway),
            expense_service.list_expenses(gateway),
            catalog_service.list_products(gateway),
            date_range=request.args.get("range", report_service.RANGE_MONTH),
        )
        return jsonify(summary), 200
    except Exception as e:
        return json_error(e, "build financial summary")


@reports_bp.get("/dashboard")
def dashboard_route():
    try:
        gateway = get_gateway()
        stats = report_service.dashboard_stats(
            invoice_service.list_invoices(gateway),
            catalog_service.list_products(gateway),
            low_stock_threshold=current_app.config.get("LOW_STOCK_THRESHOLD", 5),
        )
        return jsonify(stats), 200
    except Exception as e:
        return json_error(e, "build dashboard")
