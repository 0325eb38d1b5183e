# bivo/app.py

import logging
import os

from flask import Flask, jsonify, request
from flask_cors import CORS
from flask_jwt_extended import JWTManager, jwt_required

from . import auth, categories, db, transactions, users
from .config import load_config
from .dashboard import PeriodOutOfRange, compute_dashboard
from .ledger import LedgerStore

logger = logging.getLogger("bivo-backend")


def _unauthorized(reason):
    logger.info(f"Rejected request to {request.path}: {reason}")
    return jsonify({"error": "Unauthorized"}), 401


def _register_jwt_handlers(jwt):
    @jwt.unauthorized_loader
    def missing_token(reason):
        return _unauthorized(reason)

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return _unauthorized(reason)

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return _unauthorized("token expired")


def _int_arg(name):
    """Integer query arg or None when absent; raises ValueError when malformed."""
    value = request.args.get(name)
    if value is None or value.strip() == '':
        return None
    return int(value)


# ---------------- Flask App Factory ----------------
def create_app(test_config=None):
    app = Flask(__name__)
    app.config.update(load_config())
    if test_config:
        app.config.update(test_config)

    logging.basicConfig(level=app.config.get("LOG_LEVEL", "INFO"))

    # JWT
    jwt = JWTManager(app)
    _register_jwt_handlers(jwt)

    # CORS
    origins = [o.strip() for o in app.config["CORS_ORIGINS"].split(",") if o.strip()]
    CORS(app, resources={r"/*": {"origins": origins}}, supports_credentials=True)

    # Blueprints
    app.register_blueprint(auth.auth_bp, url_prefix='/auth')
    app.register_blueprint(categories.bp)
    app.register_blueprint(transactions.bp)
    app.register_blueprint(users.bp)

    # Database
    db.init_app(app)
    with app.app_context():
        db.init_db()
        logger.info(f"Database initialized at {app.config['DB_PATH']}")

    # ---------------- Core Endpoints ----------------
    @app.route('/')
    def root():
        return jsonify({"msg": "BIVO budgeting backend"})

    @app.route('/health')
    def health():
        return jsonify({"status": "ok"})

    # ---------------- Dashboard ----------------
    @app.route('/dashboard', methods=['GET'])
    @jwt_required()
    def dashboard():
        credential = auth.current_credential()
        try:
            month = _int_arg('month')
            year = _int_arg('year')
        except ValueError:
            return jsonify({"error": "month and year must be integers"}), 400

        try:
            snapshot = compute_dashboard(credential, month, year, store=LedgerStore(db.get_db()))
        except PeriodOutOfRange:
            return jsonify({"error": "month and year are outside the supported range"}), 400
        except Exception:
            logger.exception(f"Error fetching dashboard data for user {credential.user_id}")
            return jsonify({"error": "Internal server error"}), 500
        return jsonify(snapshot)

    return app


# ---------------- Run ----------------
if __name__ == '__main__':
    app = create_app()
    app.run(host=os.environ.get("HOST", "127.0.0.1"), port=int(os.environ.get("PORT", 5000)))
