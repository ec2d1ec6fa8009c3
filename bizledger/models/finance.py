"""
Core Data Models for bizledger

These models define the schemas for everything the state engine holds:
transactions, categories, filter parameters and the derived summary.
They are designed to:
1. Accept what the remote store actually sends (wire keys, decimal strings)
2. Serialize back to the same wire shape
3. Keep identity as the only equality key for set operations

DESIGN DECISION: Dates are calendar dates only. Anything carrying a
time-of-day is cut to its calendar part as written, never converted
between timezones, so a transaction cannot drift by a day.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# =============================================================================
# ENUMS
# =============================================================================

class TransactionKind(str, Enum):
    """
    The income/expense discriminator.

    Shared by transactions and categories. Travels on the wire as `type`.
    """
    INCOME = "income"
    EXPENSE = "expense"


class LoadStatus(str, Enum):
    """Outcome of a page load request."""
    LOADED = "loaded"     # page fetched and merged
    SKIPPED = "skipped"   # another fetch was already in flight
    FAILED = "failed"     # transport/remote failure, state unchanged
    STALE = "stale"       # filters changed while in flight, page discarded


# =============================================================================
# HELPERS
# =============================================================================

def _calendar_date(value: Any) -> Any:
    """Cut datetimes and ISO datetime strings down to their calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        value = value.strip()
        if len(value) > 10 and value[10] in ("T", " "):
            return value[:10]
    return value


def _date_change(value: Any) -> Any:
    """A merged date as a `date` when it parses; otherwise as given."""
    value = _calendar_date(value)
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            return value
    return value


def _kind_change(value: Any) -> Any:
    try:
        return TransactionKind(value)
    except ValueError:
        return value


def _decimal_input(value: Any) -> Any:
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, str):
        return value.strip()
    return value


# =============================================================================
# TRANSACTIONS
# =============================================================================

class TransactionDraft(BaseModel):
    """
    A transaction as entered by the user, before it has any identifier.

    Sent to the remote store on create.
    """
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    category_id: str = Field(
        ...,
        min_length=1,
        description="Category this transaction is filed under"
    )
    amount: Decimal = Field(
        ...,
        description="Amount (non-negative by convention)"
    )
    description: Optional[str] = Field(
        default=None,
        max_length=500,
    )
    transaction_date: date = Field(
        ...,
        alias="date",
        description="Calendar date of the transaction"
    )
    kind: TransactionKind = Field(
        ...,
        alias="type",
        description="income or expense"
    )

    @field_validator('transaction_date', mode='before')
    @classmethod
    def strip_time(cls, v: Any) -> Any:
        return _calendar_date(v)

    @field_validator('amount', mode='before')
    @classmethod
    def normalise_amount(cls, v: Any) -> Any:
        return _decimal_input(v)

    def to_wire(self) -> dict[str, Any]:
        """Request body for the remote create call."""
        return self.model_dump(mode="json", by_alias=True)


class Transaction(BaseModel):
    """
    A single income or expense record held in the local view.

    Only `id` and `amount` are required: the remote store is allowed to omit
    the rest, and a record without them is still worth showing.
    """
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True, frozen=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Unique within a transaction set"
    )
    category_id: str = Field(
        default="",
        description="Category reference; may dangle if the category was deleted"
    )
    amount: Decimal = Field(
        ...,
        description="Amount (non-negative by convention, not enforced)"
    )
    description: Optional[str] = None
    transaction_date: Optional[date] = Field(
        default=None,
        alias="date",
    )
    kind: TransactionKind = Field(
        default=TransactionKind.EXPENSE,
        alias="type",
    )

    @field_validator('id', mode='before')
    @classmethod
    def stringify_id(cls, v: Any) -> Any:
        # Numeric primary keys are common on the wire
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator('category_id', mode='before')
    @classmethod
    def stringify_category(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator('transaction_date', mode='before')
    @classmethod
    def strip_time(cls, v: Any) -> Any:
        return _calendar_date(v)

    @field_validator('amount', mode='before')
    @classmethod
    def normalise_amount(cls, v: Any) -> Any:
        return _decimal_input(v)

    @classmethod
    def from_draft(cls, transaction_id: str, draft: TransactionDraft) -> "Transaction":
        """Build a local record from a draft and an identifier."""
        return cls(id=transaction_id, **draft.model_dump())

    @classmethod
    def field_changes(cls, changes: Mapping[str, Any]) -> dict[str, Any]:
        """
        Normalise a partial update to model field names.

        Accepts either field names or wire keys (`date`, `type`). Unknown keys
        are dropped, and so is `id`: a partial update never re-keys a record.
        Dates and kinds are typed; other values, amounts included, pass
        through as given.
        """
        aliases = {
            field.alias: name
            for name, field in cls.model_fields.items()
            if field.alias
        }
        normalised: dict[str, Any] = {}
        for key, value in changes.items():
            name = aliases.get(key, key)
            if name == "id" or name not in cls.model_fields:
                continue
            if name == "transaction_date":
                value = _date_change(value)
            elif name == "kind":
                value = _kind_change(value)
            normalised[name] = value
        return normalised

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class TransactionPatch(BaseModel):
    """
    A partial transaction update.

    Only explicitly set fields are sent and applied.
    """
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    category_id: Optional[str] = None
    amount: Optional[Decimal] = None
    description: Optional[str] = None
    transaction_date: Optional[date] = Field(default=None, alias="date")
    kind: Optional[TransactionKind] = Field(default=None, alias="type")

    @field_validator('transaction_date', mode='before')
    @classmethod
    def strip_time(cls, v: Any) -> Any:
        return _calendar_date(v)

    @field_validator('amount', mode='before')
    @classmethod
    def normalise_amount(cls, v: Any) -> Any:
        return _decimal_input(v)

    def changes(self) -> dict[str, Any]:
        """
        Set fields keyed by model field name.

        An explicit None only counts for the description; the other fields
        cannot be cleared.
        """
        return {
            name: value
            for name, value in self.model_dump(exclude_unset=True).items()
            if value is not None or name == "description"
        }

    def to_wire(self) -> dict[str, Any]:
        """Set fields keyed by wire name, JSON-ready."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


# =============================================================================
# CATEGORIES
# =============================================================================

class CategoryDraft(BaseModel):
    """A category before the remote store has assigned it an id."""
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=100)
    kind: TransactionKind = Field(..., alias="type")
    icon: str = Field(default="", max_length=16)
    color: Optional[str] = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class Category(BaseModel):
    """
    A named bucket for transactions of one kind.

    Ids are only unique within a kind-collection in practice, so lookups
    always go through the kind as well.
    """
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    kind: TransactionKind = Field(..., alias="type")
    icon: str = Field(default="", max_length=16)
    color: Optional[str] = None

    @field_validator('id', mode='before')
    @classmethod
    def stringify_id(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator('icon', mode='before')
    @classmethod
    def default_icon(cls, v: Any) -> Any:
        return "" if v is None else v


# =============================================================================
# FILTERS
# =============================================================================

class DateRange(BaseModel):
    """An inclusive calendar-date interval."""
    model_config = ConfigDict(frozen=True)

    start: date
    end: date

    @field_validator('start', 'end', mode='before')
    @classmethod
    def strip_time(cls, v: Any) -> Any:
        return _calendar_date(v)

    @model_validator(mode='after')
    def validate_order(self) -> 'DateRange':
        if self.end < self.start:
            raise ValueError("Date range end cannot be before start")
        return self

    def contains(self, day: Optional[date]) -> bool:
        if day is None:
            return False
        return self.start <= day <= self.end


class FilterParams(BaseModel):
    """
    The active server-side filter set of a transaction list.

    Frozen so two filter sets can be compared to detect a change.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    kind: TransactionKind
    search: Optional[str] = None
    date_range: Optional[DateRange] = None

    @field_validator('search')
    @classmethod
    def blank_search_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


# =============================================================================
# DERIVED DATA
# =============================================================================

class FinancialSummary(BaseModel):
    """
    Totals derived from the current transaction set.

    Never stored and never edited; rebuilt whenever the set changes.
    """
    model_config = ConfigDict(frozen=True)

    total_income: Decimal = Decimal("0")
    total_expense: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")
    income_by_category: dict[str, Decimal] = Field(default_factory=dict)
    expense_by_category: dict[str, Decimal] = Field(default_factory=dict)


class MonthlyTrendPoint(BaseModel):
    """Income, expense and profit of one calendar month."""
    month: str = Field(..., description="YYYY-MM")
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")

    @property
    def profit(self) -> Decimal:
        return self.income - self.expense


class LoadResult(BaseModel):
    """
    What happened to a page load.

    Failures are reported here rather than raised; the local view is left as
    it was.
    """
    status: LoadStatus
    offset: int = 0
    received: int = Field(default=0, description="Records returned by the store")
    accepted: int = Field(default=0, description="Records that passed validation")
    has_more: bool = False
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == LoadStatus.LOADED

    @property
    def dropped(self) -> int:
        return self.received - self.accepted
