"""
Mutation Models

Every write against the remote store is tracked as an explicit record with
a small state machine:

    PENDING --confirm()--> CONFIRMED
    PENDING --roll_back()--> ROLLED_BACK

A record never leaves a terminal state. Update responses from the remote
store arrive as a tagged variant so the caller never inspects payload shape.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from bizledger.models.finance import Transaction


class MutationOperation(str, Enum):
    """Writes the coordinator knows how to perform."""
    CREATE_TRANSACTION = "create_transaction"
    UPDATE_TRANSACTION = "update_transaction"
    DELETE_TRANSACTION = "delete_transaction"
    CREATE_CATEGORY = "create_category"
    DELETE_CATEGORY = "delete_category"


class MutationState(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    ROLLED_BACK = "rolled_back"


class InvalidTransitionError(Exception):
    """A mutation record was moved out of a terminal state."""

    def __init__(self, current: MutationState, target: MutationState):
        self.current = current
        self.target = target
        super().__init__(
            f"Cannot move mutation from {current.value} to {target.value}"
        )


class MutationRecord(BaseModel):
    """
    Lifecycle of one write.

    `target_id` is the id the write started from (a temporary id for
    creates); `result_id` is the id the store confirmed.
    """

    mutation_id: UUID = Field(default_factory=uuid4)
    operation: MutationOperation
    target_id: str
    state: MutationState = MutationState.PENDING
    started_at: datetime = Field(default_factory=datetime.utcnow)
    finished_at: Optional[datetime] = None
    result_id: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.state == MutationState.PENDING

    @property
    def succeeded(self) -> bool:
        return self.state == MutationState.CONFIRMED

    def _finish(self, target: MutationState) -> None:
        if self.state != MutationState.PENDING:
            raise InvalidTransitionError(self.state, target)
        self.state = target
        self.finished_at = datetime.utcnow()

    def confirm(self, result_id: Optional[str] = None) -> "MutationRecord":
        self._finish(MutationState.CONFIRMED)
        self.result_id = result_id or self.target_id
        return self

    def roll_back(self, error_message: str) -> "MutationRecord":
        self._finish(MutationState.ROLLED_BACK)
        self.error_message = error_message
        return self


# =============================================================================
# UPDATE RESPONSES
# =============================================================================

class FullRecordResponse(BaseModel):
    """The store echoed the complete updated record."""
    variant: Literal["full"] = "full"
    record: Transaction


class PatchResponse(BaseModel):
    """The store echoed only the fields it changed."""
    variant: Literal["patch"] = "patch"
    changes: dict[str, Any] = Field(default_factory=dict)


UpdateResponse = Annotated[
    Union[FullRecordResponse, PatchResponse],
    Field(discriminator="variant"),
]
