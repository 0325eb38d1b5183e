# bivo/transactions.py

import logging
from datetime import datetime

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from .auth import current_credential
from .db import get_db
from .ledger import LedgerStore
from .models import SAVINGS, TRANSACTION_TYPES, parse_datetime

logger = logging.getLogger("bivo-backend")

bp = Blueprint("transactions", __name__, url_prefix="/transactions")


class TransactionInputError(ValueError):
    def __init__(self, message, status=400):
        super().__init__(message)
        self.message = message
        self.status = status


def parse_amount(value):
    try:
        amount = float(str(value).strip())
    except (TypeError, ValueError):
        raise TransactionInputError("Invalid amount")
    if amount != amount or amount in (float("inf"), float("-inf")):
        raise TransactionInputError("Invalid amount")
    if amount <= 0:
        raise TransactionInputError("Amount must be greater than zero")
    return amount


def parse_type(value):
    tx_type = str(value or '').strip().upper()
    if tx_type not in TRANSACTION_TYPES:
        raise TransactionInputError("Invalid transaction type")
    return tx_type


def parse_description(value):
    description = str(value).strip()
    if not description:
        raise TransactionInputError("Description cannot be empty")
    return description


def parse_date(value):
    parsed = parse_datetime(value)
    if parsed is None:
        raise TransactionInputError("Invalid date")
    return parsed


def resolve_category(store, user_id, value):
    """Owned category id for ``value``; raises 404 when it is not the user's."""
    try:
        category_id = int(value)
    except (TypeError, ValueError):
        raise TransactionInputError("Category not found", 404)
    if store.get_category(user_id, category_id) is None:
        raise TransactionInputError("Category not found", 404)
    return category_id


@bp.route("", methods=["GET"])
@jwt_required()
def list_transactions():
    credential = current_credential()
    tx_type = (request.args.get('type') or '').upper()
    tx_type = tx_type if tx_type in TRANSACTION_TYPES else None

    category_id = request.args.get('categoryId')
    if category_id is not None:
        try:
            category_id = int(category_id)
        except ValueError:
            return jsonify({"error": "categoryId must be an integer"}), 400

    start = end = None
    if request.args.get('startDate') and request.args.get('endDate'):
        start = parse_datetime(request.args['startDate'])
        end = parse_datetime(request.args['endDate'])
        if start is None or end is None:
            return jsonify({"error": "Invalid date range"}), 400

    try:
        store = LedgerStore(get_db())
        rows = store.list_transactions(credential.user_id, tx_type, category_id, start, end)
    except Exception:
        logger.exception("Failed to list transactions")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify([tx.to_dict() for tx in rows])


@bp.route("", methods=["POST"])
@jwt_required()
def add_transaction():
    credential = current_credential()
    data = request.get_json(silent=True) or {}
    description = (data.get('description') or '').strip()

    if not data.get('amount') or not description or not data.get('type'):
        return jsonify({"error": "amount, description and type are required"}), 400

    try:
        store = LedgerStore(get_db())
        amount = parse_amount(data['amount'])
        tx_type = parse_type(data['type'])
        category_id = data.get('categoryId')
        if tx_type != SAVINGS or category_id not in (None, ''):
            if category_id in (None, ''):
                raise TransactionInputError("categoryId is required")
            category_id = resolve_category(store, credential.user_id, category_id)
        else:
            category_id = None
        date = parse_date(data['date']) if data.get('date') else datetime.now().replace(microsecond=0)

        tx = store.create_transaction(credential.user_id, category_id, amount, tx_type, description, date)
    except TransactionInputError as e:
        return jsonify({"error": e.message}), e.status
    except Exception:
        logger.exception("DB insert failed")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(tx.to_dict()), 201


@bp.route("/<int:tx_id>", methods=["PUT"])
@jwt_required()
def update_transaction(tx_id):
    credential = current_credential()
    data = request.get_json(silent=True) or {}

    try:
        store = LedgerStore(get_db())
        existing = store.get_transaction(credential.user_id, tx_id)
        if existing is None:
            return jsonify({"error": "Transaction not found"}), 404

        changes = {}
        if data.get('amount') is not None:
            changes['amount'] = parse_amount(data['amount'])
        if data.get('description') is not None:
            changes['description'] = parse_description(data['description'])
        if data.get('type') is not None:
            changes['type'] = parse_type(data['type'])
        if data.get('categoryId') not in (None, ''):
            changes['category_id'] = resolve_category(store, credential.user_id, data['categoryId'])
        if data.get('date') is not None:
            changes['date'] = parse_date(data['date'])

        if changes.get('type', existing.type) != SAVINGS and \
                changes.get('category_id', existing.category_id) is None:
            raise TransactionInputError("categoryId is required")

        tx = store.update_transaction(credential.user_id, tx_id, changes)
    except TransactionInputError as e:
        return jsonify({"error": e.message}), e.status
    except Exception:
        logger.exception(f"Failed to update transaction {tx_id}")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(tx.to_dict())


@bp.route("/<int:tx_id>", methods=["DELETE"])
@jwt_required()
def delete_transaction(tx_id):
    credential = current_credential()
    try:
        deleted = LedgerStore(get_db()).delete_transaction(credential.user_id, tx_id)
    except Exception:
        logger.exception(f"Failed to delete transaction {tx_id}")
        return jsonify({"error": "Internal server error"}), 500

    if not deleted:
        return jsonify({"error": "Transaction not found"}), 404
    return jsonify({"message": "Transaction deleted", "deleted_transaction_id": tx_id})
