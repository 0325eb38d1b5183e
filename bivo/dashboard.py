# bivo/dashboard.py
"""Monthly dashboard aggregation.

``compute_dashboard`` builds the snapshot shown on the BIVO dashboard for one
user and one calendar month: income/expense/savings totals, the balance left
after expenses and savings, expenses grouped by category, the latest
transactions, and a six month trend ending at the requested month.

Every figure is computed on read from the ledger; nothing here writes.
"""
import calendar
import logging
from datetime import MAXYEAR, MINYEAR, date, datetime
from typing import Any, Dict, List, Optional, Tuple

from .models import (EXPENSE, INCOME, SAVINGS, UNKNOWN_CATEGORY_COLOR, UNKNOWN_CATEGORY_NAME,
                     Credential)

logger = logging.getLogger("bivo-backend")

TREND_MONTHS = 6
RECENT_LIMIT = 5


def normalize_month(year: int, month: int) -> Tuple[int, int]:
    """Fold an out-of-range month into the calendar.

    Month 13 of 2024 is January 2025, month 0 of 2025 is December 2024,
    month -1 of 2025 is November 2024.
    """
    years, month_index = divmod(month - 1, 12)
    return year + years, month_index + 1


class PeriodOutOfRange(ValueError):
    """The requested month, or a month of its trend, falls outside years 1-9999."""


def check_period(year: int, month: int) -> None:
    """Raise ``PeriodOutOfRange`` unless the month and its whole trend are representable."""
    first_year, _ = normalize_month(year, month - (TREND_MONTHS - 1))
    last_year, _ = normalize_month(year, month)
    if first_year < MINYEAR or last_year > MAXYEAR:
        raise PeriodOutOfRange(f"{year}-{month} is outside the supported range")


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    """First instant and 23:59:59 of the last day of the given month."""
    year, month = normalize_month(year, month)
    last_day = calendar.monthrange(year, month)[1]
    return datetime(year, month, 1), datetime(year, month, last_day, 23, 59, 59)


def month_label(year: int, month: int) -> str:
    year, month = normalize_month(year, month)
    return f"{calendar.month_abbr[month]} {year}"


def month_totals(store, user_id, year: int, month: int) -> Dict[str, float]:
    start, end = month_bounds(year, month)
    income = store.sum_amount(user_id, INCOME, start, end)
    expense = store.sum_amount(user_id, EXPENSE, start, end)
    savings = store.sum_amount(user_id, SAVINGS, start, end)
    return {
        'income': income,
        'expense': expense,
        'savings': savings,
        'balance': income - expense - savings,
    }


def expenses_by_category(store, user_id, start: datetime, end: datetime) -> List[Dict[str, Any]]:
    groups = store.group_and_sum_by_category(user_id, EXPENSE, start, end)
    categories = {c.id: c for c in store.find_categories_by_ids([g['category_id'] for g in groups])}

    results = []
    for group in groups:
        category = categories.get(group['category_id'])
        results.append({
            'categoryId': group['category_id'],
            'category': category.name if category else UNKNOWN_CATEGORY_NAME,
            'color': category.color if category else UNKNOWN_CATEGORY_COLOR,
            'amount': group['amount'],
            'count': group['count'],
        })
    results.sort(key=lambda r: r['amount'], reverse=True)
    return results


def monthly_trend(store, user_id, year: int, month: int) -> List[Dict[str, Any]]:
    trend = []
    for offset in range(TREND_MONTHS - 1, -1, -1):
        trend_year, trend_month = normalize_month(year, month - offset)
        totals = month_totals(store, user_id, trend_year, trend_month)
        trend.append({
            'month': month_label(trend_year, trend_month),
            'income': totals['income'],
            'expense': totals['expense'],
            'savings': totals['savings'],
        })
    return trend


def compute_dashboard(credential: Credential, target_month: Optional[int] = None,
                      target_year: Optional[int] = None, *, store,
                      today: Optional[date] = None) -> Dict[str, Any]:
    """Compute the dashboard snapshot for ``credential.user_id``.

    Missing month/year default to ``today`` (the current date when not given).
    Months outside 1-12 are not rejected; they roll over into the adjacent
    years via ``normalize_month``. The reported ``summary.month``/``year``
    echo what the caller asked for.

    Raises ``PeriodOutOfRange`` when the month or any month of its trend has
    a year outside 1-9999. Errors raised by ``store`` propagate unchanged.
    """
    today = today or date.today()
    month = target_month if target_month is not None else today.month
    year = target_year if target_year is not None else today.year
    user_id = credential.user_id

    check_period(year, month)
    start, end = month_bounds(year, month)
    logger.info(f"Dashboard for user {user_id}: {start:%Y-%m-%d} to {end:%Y-%m-%d}")

    totals = month_totals(store, user_id, year, month)
    recent = store.find_recent_transactions(user_id, RECENT_LIMIT)

    return {
        'summary': {
            'totalIncome': totals['income'],
            'totalExpense': totals['expense'],
            'totalSavings': totals['savings'],
            'balance': totals['balance'],
            'month': month,
            'year': year,
        },
        'expensesByCategory': expenses_by_category(store, user_id, start, end),
        'recentTransactions': [tx.to_dict() for tx in recent],
        'monthlyTrend': monthly_trend(store, user_id, year, month),
    }
