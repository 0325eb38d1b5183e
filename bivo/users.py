# bivo/users.py
import logging

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from . import db
from .accounts import UserStore
from .auth import current_credential
from .ledger import LedgerStore

logger = logging.getLogger("bivo-backend")

bp = Blueprint("user", __name__, url_prefix="/user")


@bp.route("/stats", methods=["GET"])
@jwt_required()
def stats():
    """Lifetime totals for the current user (not limited to a month)."""
    credential = current_credential()
    try:
        return jsonify(LedgerStore(db.get_db()).user_stats(credential.user_id))
    except Exception:
        logger.exception("Failed to compute user stats")
        return jsonify({"error": "Internal server error"}), 500


@bp.route("/update", methods=["PUT"])
@jwt_required()
def update_profile():
    credential = current_credential()
    data = request.get_json(silent=True) or {}
    name = (data.get('name') or '').strip()
    email = (data.get('email') or '').strip().lower()

    if not name or not email:
        return jsonify({"error": "Name and email are required"}), 400

    try:
        accounts = UserStore(db.get_db())
        if accounts.email_taken_by_other(email, credential.user_id):
            return jsonify({"error": "Email is already used by another user"}), 400

        user = accounts.update_profile(credential.user_id, name, email)
    except Exception:
        logger.exception("Failed to update profile")
        return jsonify({"error": "Internal server error"}), 500

    if user is None:
        return jsonify({"error": "User not found"}), 404
    logger.info(f"User {user.id} updated profile")
    return jsonify({"user": user.to_dict()})
