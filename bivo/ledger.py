# bivo/ledger.py
import logging
from typing import Dict, Iterable, List, Optional

from .db import SqliteStore
from .models import Category, Transaction, format_datetime

logger = logging.getLogger("bivo-backend")

_TX_WITH_CATEGORY = """
    SELECT t.id, t.user_id, t.category_id, t.amount, t.type, t.description, t.date, t.created_at,
           c.name AS category_name, c.color AS category_color
    FROM transactions t
    LEFT JOIN categories c ON c.id = t.category_id
"""

# Columns a transaction update may touch
UPDATABLE_FIELDS = ('amount', 'description', 'type', 'category_id', 'date')


class LedgerStore(SqliteStore):
    """Transaction and category queries for one user-facing request.

    Wraps an open sqlite3 connection (row_factory = sqlite3.Row). Date
    arguments are datetimes; they are compared against the stored
    'YYYY-MM-DD HH:MM:SS' text, so both range bounds are inclusive.
    """

    # ---------------- Aggregation queries ----------------
    def sum_amount(self, user_id, tx_type, start, end) -> float:
        row = self._query(
            "SELECT SUM(amount) AS total FROM transactions "
            "WHERE user_id=? AND type=? AND date >= ? AND date <= ?",
            (user_id, tx_type, format_datetime(start), format_datetime(end)),
            one=True,
        )
        return float(row['total'] or 0)

    def group_and_sum_by_category(self, user_id, tx_type, start, end) -> List[Dict]:
        rows = self._query(
            """
            SELECT category_id, SUM(amount) AS amount, COUNT(id) AS count
            FROM transactions
            WHERE user_id=? AND type=? AND date >= ? AND date <= ?
            GROUP BY category_id
            ORDER BY amount DESC
            """,
            (user_id, tx_type, format_datetime(start), format_datetime(end)),
        )
        return [
            {'category_id': r['category_id'], 'amount': float(r['amount'] or 0), 'count': r['count']}
            for r in rows
        ]

    def find_categories_by_ids(self, ids: Iterable[int]) -> List[Category]:
        ids = [i for i in ids if i is not None]
        if not ids:
            return []
        placeholders = ",".join("?" for _ in ids)
        rows = self._query(
            f"SELECT id, user_id, name, color FROM categories WHERE id IN ({placeholders})",
            tuple(ids),
        )
        return [Category.from_row(r) for r in rows]

    def find_recent_transactions(self, user_id, limit=5) -> List[Transaction]:
        rows = self._query(
            _TX_WITH_CATEGORY + " WHERE t.user_id=? ORDER BY t.date DESC, t.id DESC LIMIT ?",
            (user_id, limit),
        )
        return [Transaction.from_row(r) for r in rows]

    # ---------------- Transactions ----------------
    def list_transactions(self, user_id, tx_type=None, category_id=None, start=None, end=None):
        filters = ["t.user_id=?"]
        params = [user_id]
        if tx_type:
            filters.append("t.type=?")
            params.append(tx_type)
        if category_id is not None:
            filters.append("t.category_id=?")
            params.append(category_id)
        if start is not None and end is not None:
            filters.append("t.date >= ? AND t.date <= ?")
            params.extend([format_datetime(start), format_datetime(end)])
        rows = self._query(
            _TX_WITH_CATEGORY + " WHERE " + " AND ".join(filters) + " ORDER BY t.date DESC, t.id DESC",
            tuple(params),
        )
        return [Transaction.from_row(r) for r in rows]

    def get_transaction(self, user_id, tx_id) -> Optional[Transaction]:
        row = self._query(_TX_WITH_CATEGORY + " WHERE t.id=? AND t.user_id=?", (tx_id, user_id), one=True)
        return Transaction.from_row(row) if row else None

    def create_transaction(self, user_id, category_id, amount, tx_type, description, date) -> Transaction:
        tx_id = self._execute(
            "INSERT INTO transactions (user_id, category_id, amount, type, description, date) "
            "VALUES (?,?,?,?,?,?)",
            (user_id, category_id, amount, tx_type, description, format_datetime(date)),
        )
        logger.info(f"Transaction {tx_id} created for user {user_id}")
        return self.get_transaction(user_id, tx_id)

    def update_transaction(self, user_id, tx_id, changes: Dict) -> Optional[Transaction]:
        fields = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
        if 'date' in fields:
            fields['date'] = format_datetime(fields['date'])
        if fields:
            assignments = ", ".join(f"{k}=?" for k in fields)
            self._execute(
                f"UPDATE transactions SET {assignments} WHERE id=? AND user_id=?",
                tuple(fields.values()) + (tx_id, user_id),
            )
            logger.info(f"Transaction {tx_id} updated for user {user_id}: {sorted(fields)}")
        return self.get_transaction(user_id, tx_id)

    def delete_transaction(self, user_id, tx_id) -> bool:
        deleted = self._execute("DELETE FROM transactions WHERE id=? AND user_id=?", (tx_id, user_id))
        if deleted:
            logger.info(f"Transaction {tx_id} deleted for user {user_id}")
        return bool(deleted)

    # ---------------- Categories ----------------
    def list_categories(self, user_id) -> List[Category]:
        rows = self._query(
            """
            SELECT c.id, c.user_id, c.name, c.color, COUNT(t.id) AS transaction_count
            FROM categories c
            LEFT JOIN transactions t ON t.category_id = c.id
            WHERE c.user_id=?
            GROUP BY c.id
            ORDER BY c.name ASC
            """,
            (user_id,),
        )
        return [Category.from_row(r) for r in rows]

    def get_category(self, user_id, category_id) -> Optional[Category]:
        row = self._query(
            "SELECT id, user_id, name, color FROM categories WHERE id=? AND user_id=?",
            (category_id, user_id),
            one=True,
        )
        return Category.from_row(row) if row else None

    def find_category_by_name(self, user_id, name) -> Optional[Category]:
        row = self._query(
            "SELECT id, user_id, name, color FROM categories WHERE user_id=? AND name=?",
            (user_id, name),
            one=True,
        )
        return Category.from_row(row) if row else None

    def create_category(self, user_id, name, color) -> Category:
        category_id = self._execute(
            "INSERT INTO categories (user_id, name, color) VALUES (?,?,?)", (user_id, name, color)
        )
        logger.info(f"Category {category_id} '{name}' created for user {user_id}")
        return Category(category_id, user_id, name, color, 0)

    def count_category_references(self, category_id) -> int:
        row = self._query(
            "SELECT COUNT(*) AS count FROM transactions WHERE category_id=?", (category_id,), one=True
        )
        return row['count']

    def delete_category(self, user_id, category_id) -> bool:
        deleted = self._execute("DELETE FROM categories WHERE id=? AND user_id=?", (category_id, user_id))
        if deleted:
            logger.info(f"Category {category_id} deleted for user {user_id}")
        return bool(deleted)

    # ---------------- Lifetime stats ----------------
    def user_stats(self, user_id) -> Dict:
        row = self._query(
            """
            SELECT COUNT(*) AS total_transactions,
                   SUM(CASE WHEN type='INCOME' THEN amount ELSE 0 END) AS total_income,
                   SUM(CASE WHEN type='EXPENSE' THEN amount ELSE 0 END) AS total_expense,
                   COUNT(DISTINCT category_id) AS categories_used
            FROM transactions
            WHERE user_id=?
            """,
            (user_id,),
            one=True,
        )
        return {
            'totalTransactions': row['total_transactions'],
            'totalIncome': float(row['total_income'] or 0),
            'totalExpense': float(row['total_expense'] or 0),
            'categoriesUsed': row['categories_used'],
        }
