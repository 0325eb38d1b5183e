# bivo/auth.py
import logging
import sqlite3

from flask import Blueprint, jsonify, request
from flask_jwt_extended import (create_access_token, get_jwt, get_jwt_identity, jwt_required,
                                set_access_cookies, unset_jwt_cookies)
from werkzeug.security import check_password_hash, generate_password_hash

from . import db
from .accounts import UserStore
from .models import Credential

logger = logging.getLogger("bivo-backend")

auth_bp = Blueprint("auth", __name__)

DEFAULT_CATEGORIES = [
    ("Makanan", "#EF4444"),
    ("Transportasi", "#F59E0B"),
    ("Belanja", "#8B5CF6"),
    ("Topup Ewallet", "#3B82F6"),
    ("Gaji", "#10B981"),
    ("Bonus", "#06B6D4"),
]

GUEST_DEFAULT_CATEGORIES = [
    ("Makanan", "#EF4444"),
    ("Transport", "#3B82F6"),
    ("Belanja", "#10B981"),
    ("Hiburan", "#F59E0B"),
    ("Lainnya", "#6B7280"),
]


def current_credential():
    """Credential for the verified JWT of the current request."""
    claims = get_jwt()
    return Credential(
        user_id=int(get_jwt_identity()),
        email=claims.get("email"),
        is_guest=bool(claims.get("is_guest", False)),
    )


def issue_token(user):
    return create_access_token(
        identity=str(user.id),
        additional_claims={"email": user.email, "is_guest": user.is_guest},
    )


def _token_response(user, message, status=200):
    token = issue_token(user)
    response = jsonify({"message": message, "user": user.to_dict(), "access_token": token})
    set_access_cookies(response, token)
    return response, status


@auth_bp.route('/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    name = (data.get('name') or '').strip()
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''

    if not name or not email or not password:
        return jsonify({"error": "Name, email and password are required"}), 400

    try:
        accounts = UserStore(db.get_db())
        if accounts.find_by_email(email):
            return jsonify({"error": "Email is already registered"}), 400

        user = accounts.create_user(name, email, generate_password_hash(password), False,
                                    DEFAULT_CATEGORIES)
    except sqlite3.IntegrityError as e:
        if "users.email" in str(e):
            return jsonify({"error": "Email is already registered"}), 400
        logger.exception("Registration failed")
        return jsonify({"error": "Internal server error"}), 500
    except Exception:
        logger.exception("Registration failed")
        return jsonify({"error": "Internal server error"}), 500

    logger.info(f"Registered user {user.id}")
    return jsonify({"message": "User created", "user": user.to_dict()}), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''

    if not email or not password:
        return jsonify({"error": "Email and password are required"}), 400

    try:
        user = UserStore(db.get_db()).find_by_email(email)
    except Exception:
        logger.exception("Login lookup failed")
        return jsonify({"error": "Internal server error"}), 500

    if not user or not user.password_hash or not check_password_hash(user.password_hash, password):
        logger.warning(f"Failed login for {email}")
        return jsonify({"error": "Invalid email or password"}), 401

    logger.info(f"User {user.id} logged in")
    return _token_response(user, "Login successful")


@auth_bp.route('/logout', methods=['POST'])
def logout():
    response = jsonify({"message": "Logout successful"})
    unset_jwt_cookies(response)
    return response, 200


@auth_bp.route('/me', methods=['GET'])
@jwt_required()
def me():
    credential = current_credential()
    try:
        user = UserStore(db.get_db()).get_user(credential.user_id)
    except Exception:
        logger.exception("Failed to load current user")
        return jsonify({"error": "Internal server error"}), 500
    if not user:
        return jsonify({"error": "User not found"}), 404
    return jsonify({"user": user.to_dict()})


@auth_bp.route('/guest', methods=['POST'])
def guest():
    data = request.get_json(silent=True) or {}
    name = (data.get('name') or '').strip() or "Guest"

    try:
        user = UserStore(db.get_db()).create_user(name, None, None, True, GUEST_DEFAULT_CATEGORIES)
    except Exception:
        logger.exception("Guest creation failed")
        return jsonify({"error": "Failed to create guest user"}), 500

    logger.info(f"Created guest user {user.id}")
    return _token_response(user, "Guest session started", 201)
