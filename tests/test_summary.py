"""
Tests for the summary aggregator, analytics helpers and local view filters.
"""

from datetime import date
from decimal import Decimal

import pytest

from bizledger.models.finance import Category, DateRange, TransactionKind
from bizledger.state.reducer import merge_by_id
from bizledger.state.summary import (
    category_breakdown,
    category_share,
    compute_summary,
    monthly_trend,
    parse_amount,
)
from bizledger.state.view import filter_transactions, filtered_total, sort_for_display


INCOME = TransactionKind.INCOME
EXPENSE = TransactionKind.EXPENSE


class TestParseAmount:
    """Tests for tolerant amount parsing."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (Decimal("12.50"), Decimal("12.50")),
            (7, Decimal("7")),
            (0.1, Decimal("0.1")),
            ("150.25", Decimal("150.25")),
            ("  42 ", Decimal("42")),
        ],
    )
    def test_numeric_like_values(self, raw, expected):
        assert parse_amount(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "abc", "NaN", "Infinity", True, object()])
    def test_garbage_counts_as_zero(self, raw):
        assert parse_amount(raw) == 0


class TestComputeSummary:
    """Tests for compute_summary."""

    def test_mixed_scenario(self, make_txn):
        """Income and expense totals, balance and per-category maps."""
        transactions = [
            make_txn("1", amount=100, kind=INCOME, category_id="a"),
            make_txn("2", amount=40, kind=EXPENSE, category_id="b"),
            make_txn("3", amount=60, kind=INCOME, category_id="a"),
        ]
        summary = compute_summary(transactions)
        assert summary.total_income == 160
        assert summary.total_expense == 40
        assert summary.balance == 120
        assert summary.income_by_category == {"a": Decimal("160")}
        assert summary.expense_by_category == {"b": Decimal("40")}

    def test_empty_sequence_is_zero(self):
        summary = compute_summary([])
        assert summary.total_income == 0
        assert summary.total_expense == 0
        assert summary.balance == 0
        assert summary.income_by_category == {}
        assert summary.expense_by_category == {}

    def test_kind_scopes_category_buckets(self, make_txn):
        """An income transaction never lands in the expense map."""
        transactions = [
            make_txn("1", amount=10, kind=INCOME, category_id="shared"),
            make_txn("2", amount=3, kind=EXPENSE, category_id="shared"),
        ]
        summary = compute_summary(transactions)
        assert summary.income_by_category == {"shared": Decimal("10")}
        assert summary.expense_by_category == {"shared": Decimal("3")}

    def test_unparseable_merged_amount_contributes_zero(self, make_txn):
        """A merged raw patch may carry text; bad text counts as zero."""
        transactions = [make_txn("1", amount=10), make_txn("2", amount=5)]
        transactions = merge_by_id(transactions, "1", {"amount": "not a number"})
        transactions = merge_by_id(transactions, "2", {"amount": "7.5"})
        summary = compute_summary(transactions)
        assert summary.total_income == Decimal("7.5")

    def test_negative_balance(self, make_txn):
        summary = compute_summary([make_txn("1", amount=5, kind=EXPENSE)])
        assert summary.balance == -5


class TestAnalytics:
    """Tests for category breakdown and monthly trend."""

    def test_breakdown_skips_empty_categories(self):
        categories = [
            Category(id="a", name="A", kind=INCOME),
            Category(id="b", name="B", kind=INCOME),
            Category(id="c", name="C", kind=INCOME),
        ]
        rows = category_breakdown(categories, {"c": Decimal("5"), "a": Decimal("2"), "zzz": Decimal("9")})
        assert [(c.id, amount) for c, amount in rows] == [("a", Decimal("2")), ("c", Decimal("5"))]

    def test_category_share(self):
        assert category_share(Decimal("25"), Decimal("200")) == Decimal("12.5")
        assert category_share(Decimal("25"), Decimal("0")) == 0

    def test_monthly_trend_keeps_latest_months(self, make_txn):
        transactions = [
            make_txn(str(month), amount=month * 10, day=date(2024, month, 15))
            for month in range(1, 9)
        ]
        transactions.append(make_txn("x", amount=30, kind=EXPENSE, day=date(2024, 8, 1)))
        trend = monthly_trend(transactions, months=3)
        assert [p.month for p in trend] == ["2024-06", "2024-07", "2024-08"]
        august = trend[-1]
        assert august.income == Decimal("80")
        assert august.expense == Decimal("30")
        assert august.profit == Decimal("50")

    def test_monthly_trend_counts_merged_wire_date(self, make_txn):
        """A date arriving as text in a raw patch still lands in its month."""
        transactions = merge_by_id([make_txn("1", amount=40)], "1", {"date": "2024-02-01"})
        trend = monthly_trend(transactions)
        assert [(p.month, p.income) for p in trend] == [("2024-02", Decimal("40"))]
        assert [t.id for t in sort_for_display(transactions)] == ["1"]

    def test_monthly_trend_skips_undated(self, make_txn):
        undated = make_txn("1").model_copy(update={"transaction_date": None})
        assert monthly_trend([undated]) == []


class TestViewFilters:
    """Tests for local view filtering."""

    def test_filter_by_category_and_min_amount(self, make_txn):
        transactions = [
            make_txn("1", amount=50, category_id="a"),
            make_txn("2", amount=500, category_id="a"),
            make_txn("3", amount=900, category_id="b"),
        ]
        result = filter_transactions(transactions, category_id="a", min_amount=Decimal("100"))
        assert [t.id for t in result] == ["2"]

    def test_filter_by_kind_and_dates(self, make_txn):
        transactions = [
            make_txn("1", day=date(2024, 1, 1)),
            make_txn("2", day=date(2024, 1, 31)),
            make_txn("3", day=date(2024, 2, 1)),
            make_txn("4", kind=EXPENSE, day=date(2024, 1, 10)),
        ]
        january = DateRange(start=date(2024, 1, 1), end=date(2024, 1, 31))
        result = filter_transactions(transactions, kind=INCOME, date_range=january)
        assert [t.id for t in result] == ["1", "2"]

    def test_filtered_total(self, make_txn):
        assert filtered_total([make_txn("1", amount="1.5"), make_txn("2", amount=2)]) == Decimal("3.5")
        assert filtered_total([]) == 0

    def test_sort_for_display_returns_copy(self, make_txn):
        transactions = [
            make_txn("old", day=date(2024, 1, 1)),
            make_txn("new", day=date(2024, 3, 1)),
        ]
        ordered = sort_for_display(transactions)
        assert [t.id for t in ordered] == ["new", "old"]
        assert [t.id for t in transactions] == ["old", "new"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
