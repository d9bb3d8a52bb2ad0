# Overview: Flask API routes for products and customers; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify

from ..services import catalog_service
from ..storage import get_gateway
from .errors import json_error, json_payload

products_bp = Blueprint("products", __name__, url_prefix="/api")


@products_bp.get("/products")
def list_products_route():
    """
    List products sorted by name.

    Query params:
    - q: str (optional) - case-insensitive match on name, SKU or category
    """
    try:
        products = catalog_service.list_products(get_gateway(), search=request.args.get("q"))
        return jsonify({"items": [p.to_dict() for p in products], "count": len(products)}), 200
    except Exception as e:
        return json_error(e, "list products")


@products_bp.post("/products")
def create_product_route():
    try:
        product = catalog_service.create_product(get_gateway(), json_payload())
        return jsonify({"product": product.to_dict()}), 201
    except Exception as e:
        return json_error(e, "create product")


@products_bp.get("/products/<product_id>")
def get_product_route(product_id: str):
    try:
        product = catalog_service.get_product(get_gateway(), product_id)
        return jsonify({"product": product.to_dict()}), 200
    except Exception as e:
        return json_error(e, "load product")


@products_bp.put("/products/<product_id>")
def update_product_route(product_id: str):
    """
    Update descriptive and pricing fields.

    Stock is not writable here; it only changes through invoices.
    """
    try:
        product = catalog_service.update_product(get_gateway(), product_id, json_payload())
        return jsonify({"product": product.to_dict()}), 200
    except Exception as e:
        return json_error(e, "update product")


@products_bp.delete("/products/<product_id>")
def delete_product_route(product_id: str):
    try:
        catalog_service.delete_product(get_gateway(), product_id)
        return jsonify({"deleted": product_id}), 200
    except Exception as e:
        return json_error(e, "delete product")


@products_bp.get("/customers")
def list_customers_route():
    try:
        customers = catalog_service.list_customers(get_gateway())
        return jsonify({"items": [c.to_dict() for c in customers], "count": len(customers)}), 200
    except Exception as e:
        return json_error(e, "list customers")


@products_bp.post("/customers")
def add_customer_route():
    try:
        customer = catalog_service.add_customer(get_gateway(), json_payload())
        return jsonify({"customer": customer.to_dict()}), 201
    except Exception as e:
        return json_error(e, "add customer")


@products_bp.get("/customers/<customer_id>")
def get_customer_route(customer_id: str):
    try:
        customer = catalog_service.get_customer(get_gateway(), customer_id)
        return jsonify({"customer": customer.to_dict()}), 200
    except Exception as e:
        return json_error(e, "load customer")
