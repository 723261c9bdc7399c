"""
Read models exposed by the campaign ledger.

Snapshots are pydantic models so indexers and the CLI can serialize
them directly (``model_dump`` / ``model_dump_json``).
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class CampaignStatus(str, Enum):
    """Lifecycle status derived from the stored phase and the clock."""

    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    GOAL_REACHED_OPEN = "goal_reached_open"
    ENDED_SUCCESS = "ended_success"
    ENDED_FAILURE = "ended_failure"
    CANCELLED = "cancelled"
    CLAIMED = "claimed"

    @property
    def label(self) -> str:
        """Badge text shown on a campaign card."""
        return _STATUS_LABELS[self]


_STATUS_LABELS = {
    CampaignStatus.UNINITIALIZED: "Not Started",
    CampaignStatus.ACTIVE: "Active",
    CampaignStatus.GOAL_REACHED_OPEN: "Met Goal",
    CampaignStatus.ENDED_SUCCESS: "Met Goal",
    CampaignStatus.ENDED_FAILURE: "Did Not Meet Goal",
    CampaignStatus.CANCELLED: "Cancelled",
    CampaignStatus.CLAIMED: "Funds Claimed",
}


class CampaignDetails(BaseModel):
    """Full snapshot of a campaign as of the last committed operation."""

    owner: str
    title: str
    description: str
    goal: int
    raised_amount: int
    start_time: int
    end_time: int
    goal_reached: bool
    funds_claimed: bool
    cancelled: bool
    ended: bool
    contributors_count: int = 0
    status: CampaignStatus = CampaignStatus.ACTIVE


class DonorRow(BaseModel):
    """One row of the top-contributors table."""

    rank: int
    identity: str
    amount: int


class EventType(str, Enum):
    """Kinds of entries in a campaign's event journal."""

    INITIALIZED = "initialized"
    CONTRIBUTION = "contribution"
    GOAL_REACHED = "goal_reached"
    CANCELLED = "cancelled"
    ENDED = "ended"
    FUNDS_CLAIMED = "funds_claimed"
    REFUND_CLAIMED = "refund_claimed"


class CampaignEvent(BaseModel):
    """Journal entry appended after an operation commits."""

    seq: int
    event_type: EventType
    timestamp: int  # ledger clock, seconds
    actor: str
    amount: Optional[int] = None
