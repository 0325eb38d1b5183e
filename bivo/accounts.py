# bivo/accounts.py
import logging
from typing import Iterable, Optional, Tuple

from .db import SqliteStore
from .models import User

logger = logging.getLogger("bivo-backend")


class UserStore(SqliteStore):
    """User account queries over the same connection the ledger uses."""

    def get_user(self, user_id) -> Optional[User]:
        row = self._query("SELECT * FROM users WHERE id=?", (user_id,), one=True)
        return User.from_row(row) if row else None

    def find_by_email(self, email) -> Optional[User]:
        row = self._query("SELECT * FROM users WHERE email=?", (email,), one=True)
        return User.from_row(row) if row else None

    def email_taken_by_other(self, email, user_id) -> bool:
        row = self._query("SELECT id FROM users WHERE email=? AND id != ?", (email, user_id), one=True)
        return row is not None

    def create_user(self, name, email, password_hash, is_guest,
                    categories: Iterable[Tuple[str, str]]) -> User:
        """Insert a user together with its starter categories.

        Both inserts commit together; if either fails, neither is kept.
        """
        with self.conn:
            cur = self.conn.execute(
                "INSERT INTO users (name, email, password_hash, is_guest) VALUES (?,?,?,?)",
                (name, email, password_hash, 1 if is_guest else 0),
            )
            user_id = cur.lastrowid
            self.conn.executemany(
                "INSERT INTO categories (user_id, name, color) VALUES (?,?,?)",
                [(user_id, cat_name, color) for cat_name, color in categories],
            )
        return self.get_user(user_id)

    def update_profile(self, user_id, name, email) -> Optional[User]:
        self._execute("UPDATE users SET name=?, email=? WHERE id=?", (name, email, user_id))
        return self.get_user(user_id)
