"""
Query Execution Engine

Read-side queries computed from stored records:
- Monthly income / expense totals
- Expense breakdown by category
- Upcoming bills and events
- Note search

Everything is computed in memory from one read of the collection. Money is
summed as Decimal and reported as strings with two decimal places.
"""

from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from finance_monitor.models.records import (
    Bill,
    CategoryExpense,
    Event,
    MonthlyTotals,
    Note,
    Transaction,
    TransactionType,
)
from finance_monitor.services.storage import FinanceStorage


UNCATEGORIZED = "Uncategorized"
CENT = Decimal("0.01")


class QueryExecutionError(Exception):
    """Error during query execution."""
    pass


def format_money(amount: Decimal) -> str:
    """Currency string with exactly two decimals, rounding half up."""
    return str(amount.quantize(CENT, rounding=ROUND_HALF_UP))


def in_month(moment: Optional[datetime], month: int, year: int) -> bool:
    """True when the moment falls in the month, by local calendar date."""
    if moment is None:
        return False
    local = moment.astimezone()
    return local.month == month and local.year == year


def in_window(moment: Optional[datetime], start: datetime, end: datetime) -> bool:
    return moment is not None and start <= moment <= end


class QueryExecutor:
    """
    Executes the derived queries against FinanceStorage.

    now_provider can be swapped in tests to pin the clock.
    """

    def __init__(self, storage: FinanceStorage, now_provider=None):
        self._storage = storage
        self._now = now_provider or (lambda: datetime.now(timezone.utc))

    @staticmethod
    def _check_month(month: int, year: int) -> None:
        if not 1 <= month <= 12:
            raise QueryExecutionError(f"Month must be between 1 and 12, got {month}")
        if year < 1:
            raise QueryExecutionError(f"Invalid year: {year}")

    def _window(self, days: int) -> tuple[datetime, datetime]:
        if days < 0:
            raise QueryExecutionError(f"Days must not be negative, got {days}")
        now = self._now()
        return now, now + timedelta(days=days)

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def transactions_by_month(self, user_id: str, month: int, year: int) -> list[Transaction]:
        """The user's transactions dated in the given month, newest first."""
        self._check_month(month, year)
        return [
            t for t in self._storage.get_all_transactions(user_id)
            if in_month(t.transaction_date, month, year)
        ]

    def monthly_totals(self, user_id: str, month: int, year: int) -> MonthlyTotals:
        """
        Sum income and expenses for one month.

        Anything that is not INCOME counts as an expense.
        """
        income = Decimal("0")
        expenses = Decimal("0")

        for transaction in self.transactions_by_month(user_id, month, year):
            if transaction.transaction_type == TransactionType.INCOME:
                income += transaction.amount
            else:
                expenses += transaction.amount

        return MonthlyTotals(
            income=format_money(income),
            expenses=format_money(expenses),
            net_savings=format_money(income - expenses),
        )

    def expenses_by_category(self, user_id: str, month: int, year: int) -> list[CategoryExpense]:
        """
        Group one month's expenses by category name.

        Groups appear in the order they are first seen. Transactions without
        a category go under "Uncategorized".
        """
        totals: dict[str, Decimal] = {}

        for transaction in self.transactions_by_month(user_id, month, year):
            if transaction.transaction_type != TransactionType.EXPENSE:
                continue
            category = transaction.category_name or UNCATEGORIZED
            totals[category] = totals.get(category, Decimal("0")) + transaction.amount

        return [
            CategoryExpense(category=category, amount=format_money(amount))
            for category, amount in totals.items()
        ]

    # -------------------------------------------------------------------------
    # Upcoming
    # -------------------------------------------------------------------------

    def upcoming_bills(self, user_id: str, days: int = 7) -> list[Bill]:
        """Unpaid bills due between now and now + days (both ends included)."""
        start, end = self._window(days)
        return [
            bill for bill in self._storage.get_all_bills(user_id)
            if not bill.is_paid and in_window(bill.due_date, start, end)
        ]

    def upcoming_events(self, user_id: str, days: int = 7) -> list[Event]:
        """Events between now and now + days (both ends included)."""
        start, end = self._window(days)
        return [
            event for event in self._storage.get_all_events(user_id)
            if in_window(event.event_date, start, end)
        ]

    # -------------------------------------------------------------------------
    # Notes
    # -------------------------------------------------------------------------

    def search_notes(self, user_id: str, keyword: str) -> list[Note]:
        """
        Case-insensitive substring match on title or content.

        An empty keyword matches every note.
        """
        term = keyword.lower()
        return [
            note for note in self._storage.get_all_notes(user_id)
            if term in note.title.lower() or term in note.content.lower()
        ]
