# bivo/categories.py
import logging
import re

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from .auth import current_credential
from .db import get_db
from .ledger import LedgerStore
from .models import DEFAULT_CATEGORY_COLOR

logger = logging.getLogger("bivo-backend")

bp = Blueprint("categories", __name__, url_prefix="/categories")

HEX_COLOR = re.compile(r'^#[0-9A-Fa-f]{6}$')


@bp.route("", methods=["GET"])
@jwt_required()
def list_categories():
    credential = current_credential()
    try:
        categories = LedgerStore(get_db()).list_categories(credential.user_id)
    except Exception:
        logger.exception("Failed to list categories")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify([c.to_dict() for c in categories])


@bp.route("", methods=["POST"])
@jwt_required()
def create_category():
    credential = current_credential()
    data = request.get_json(silent=True) or {}
    name = (data.get('name') or '').strip()
    color = (data.get('color') or '').strip() or DEFAULT_CATEGORY_COLOR

    if not name:
        return jsonify({"error": "Category name is required"}), 400
    if not HEX_COLOR.match(color):
        return jsonify({"error": "Color must be a hex value like #3B82F6"}), 400

    try:
        store = LedgerStore(get_db())
        if store.find_category_by_name(credential.user_id, name):
            return jsonify({"error": "A category with this name already exists"}), 400
        category = store.create_category(credential.user_id, name, color)
    except Exception:
        logger.exception("Failed to create category")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(category.to_dict()), 201


@bp.route("/<int:category_id>", methods=["DELETE"])
@jwt_required()
def delete_category(category_id):
    credential = current_credential()
    try:
        store = LedgerStore(get_db())
        if store.get_category(credential.user_id, category_id) is None:
            return jsonify({"error": "Category not found"}), 404

        references = store.count_category_references(category_id)
        if references:
            return jsonify({
                "error": "Category is still used by transactions",
                "transactionCount": references,
            }), 409

        store.delete_category(credential.user_id, category_id)
    except Exception:
        logger.exception(f"Failed to delete category {category_id}")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"message": "Category deleted", "deleted_category_id": category_id})
