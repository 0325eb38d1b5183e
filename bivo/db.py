# bivo/db.py
import logging
import os
import sqlite3

from flask import current_app, g

logger = logging.getLogger("bivo-backend")

SCHEMA_FILE = os.path.join(os.path.dirname(__file__), "init_db.sql")


def connect(db_path):
    """Open a SQLite connection with row access by column name."""
    os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
    conn = sqlite3.connect(db_path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def get_db():
    db = getattr(g, '_database', None)
    if db is None:
        db = g._database = connect(current_app.config["DB_PATH"])
    return db


def close_db(exception=None):
    db = g.pop('_database', None)
    if db is not None:
        try:
            db.close()
        except sqlite3.Error:
            logger.exception("Error closing DB connection")


class SqliteStore:
    """Base for query classes that wrap one open sqlite3 connection."""

    def __init__(self, conn):
        self.conn = conn

    def _query(self, query, args=(), one=False):
        cur = self.conn.execute(query, args)
        rv = cur.fetchall()
        cur.close()
        return (rv[0] if rv else None) if one else rv

    def _execute(self, query, args=()):
        cur = self.conn.cursor()
        cur.execute(query, args)
        self.conn.commit()
        result = cur.lastrowid if query.lstrip().upper().startswith("INSERT") else cur.rowcount
        cur.close()
        return result


def init_schema(conn):
    """Run init_db.sql against an open connection. Idempotent."""
    if not os.path.exists(SCHEMA_FILE):
        raise FileNotFoundError(f"init_db.sql not found at expected path: {SCHEMA_FILE}")
    with open(SCHEMA_FILE, 'r', encoding='utf-8') as f:
        conn.executescript(f.read())
    conn.commit()


def init_db(db_path=None):
    """
    Initialize the SQLite database using init_db.sql located next to this module.
    Uses IF NOT EXISTS throughout, so it is safe to call at app startup.
    """
    conn = connect(db_path or current_app.config["DB_PATH"])
    try:
        init_schema(conn)
    finally:
        conn.close()


def init_app(app):
    app.teardown_appcontext(close_db)

    @app.cli.command("init-db")
    def init_db_command():
        """Create the BIVO tables if they do not exist."""
        init_db()
        print(f"Initialized database at {current_app.config['DB_PATH']}")
