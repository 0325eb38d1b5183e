# bivo/models.py
# lightweight model classes (not DB-bound ORM)
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

INCOME = "INCOME"
EXPENSE = "EXPENSE"
SAVINGS = "SAVINGS"
TRANSACTION_TYPES = (INCOME, EXPENSE, SAVINGS)

DB_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_FORMATS = ["%Y-%m-%d %H:%M:%S", "%Y-%m-%d", "%d-%m-%Y", "%Y/%m/%d", "%d/%m/%Y"]

UNKNOWN_CATEGORY_NAME = "Unknown"
UNKNOWN_CATEGORY_COLOR = "#6B7280"
DEFAULT_CATEGORY_COLOR = "#3B82F6"


@dataclass(frozen=True)
class Credential:
    """Identity of the caller for one request, taken from a verified JWT."""
    user_id: int
    email: Optional[str] = None
    is_guest: bool = False


def parse_datetime(value):
    """Parse a client supplied date into a naive datetime, or None.

    Accepts the DATE_FORMATS above and ISO 8601 strings (with or without a
    trailing ``Z``). Aware values are converted to UTC before the zone is dropped.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        s = str(value).strip()
        if not s:
            return None
        parsed = None
        for fmt in DATE_FORMATS:
            try:
                parsed = datetime.strptime(s, fmt)
                break
            except ValueError:
                continue
        if parsed is None:
            try:
                parsed = datetime.fromisoformat(s[:-1] + "+00:00" if s.endswith("Z") else s)
            except ValueError:
                return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed.replace(microsecond=0)


def format_datetime(value):
    return value.strftime(DB_DATETIME_FORMAT)


def to_iso(value):
    """Stored 'YYYY-MM-DD HH:MM:SS' text to ISO 8601 for JSON output."""
    if not value:
        return value
    return str(value).replace(" ", "T")


class User:
    def __init__(self, id, name, email=None, password_hash=None, is_guest=False, created_at=None):
        self.id = id
        self.name = name
        self.email = email
        self.password_hash = password_hash
        self.is_guest = bool(is_guest)
        self.created_at = created_at

    @classmethod
    def from_row(cls, row):
        return cls(row['id'], row['name'], row['email'], row['password_hash'],
                   row['is_guest'], row['created_at'])

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'isGuest': self.is_guest,
            'createdAt': to_iso(self.created_at),
        }


class Category:
    def __init__(self, id, user_id, name, color=DEFAULT_CATEGORY_COLOR, transaction_count=None):
        self.id = id
        self.user_id = user_id
        self.name = name
        self.color = color
        self.transaction_count = transaction_count

    @classmethod
    def from_row(cls, row):
        keys = row.keys()
        count = row['transaction_count'] if 'transaction_count' in keys else None
        return cls(row['id'], row['user_id'], row['name'], row['color'], count)

    def to_dict(self):
        data = {'id': self.id, 'userId': self.user_id, 'name': self.name, 'color': self.color}
        if self.transaction_count is not None:
            data['transactionCount'] = self.transaction_count
        return data


class Transaction:
    def __init__(self, id, user_id, category_id, amount, type, description='', date=None,
                 created_at=None, category=None):
        self.id = id
        self.user_id = user_id
        self.category_id = category_id
        self.amount = amount
        self.type = type
        self.description = description
        self.date = date
        self.created_at = created_at
        self.category = category

    @classmethod
    def from_row(cls, row):
        """Build from a transactions row, optionally LEFT JOINed with categories
        as category_name / category_color."""
        keys = row.keys()
        category = None
        if 'category_name' in keys and row['category_name'] is not None:
            category = Category(row['category_id'], row['user_id'], row['category_name'],
                                row['category_color'])
        return cls(row['id'], row['user_id'], row['category_id'], float(row['amount']),
                   row['type'], row['description'], row['date'], row['created_at'], category)

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'categoryId': self.category_id,
            'amount': self.amount,
            'type': self.type,
            'description': self.description,
            'date': to_iso(self.date),
            'createdAt': to_iso(self.created_at),
            'category': self.category.to_dict() if self.category else None,
        }
