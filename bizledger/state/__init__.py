"""
State Engine Package

The locally cached transaction/category view and everything allowed to
change it.
"""

from bizledger.state.mutations import MutationCoordinator
from bizledger.state.pagination import PaginationController, validate_records
from bizledger.state.reducer import (
    append,
    dedupe_by_id,
    merge_by_id,
    remove_by_category,
    remove_by_id,
    replace_by_id,
)
from bizledger.state.store import LedgerStore
from bizledger.state.summary import (
    category_breakdown,
    category_share,
    compute_summary,
    monthly_trend,
    parse_amount,
)
from bizledger.state.view import filter_transactions, filtered_total, sort_for_display

__all__ = [
    "LedgerStore",
    "MutationCoordinator",
    "PaginationController",
    "append",
    "category_breakdown",
    "category_share",
    "compute_summary",
    "dedupe_by_id",
    "filter_transactions",
    "filtered_total",
    "merge_by_id",
    "monthly_trend",
    "parse_amount",
    "remove_by_category",
    "remove_by_id",
    "replace_by_id",
    "sort_for_display",
    "validate_records",
]
