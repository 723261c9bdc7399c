"""
Crowdfund campaign engine.

Accounting and state-transition core for goal-and-deadline fund raising:
- Contribution bookkeeping and goal evaluation
- Bounded top-donor ranking
- Mutually exclusive fund claim / refund / cancel resolution
- Registry of campaigns sharing one clock
"""

from .campaign import Campaign, Phase
from .clock import (
    Clock,
    ManualClock,
    SystemClock,
    SECONDS_PER_DAY,
    SECONDS_PER_HOUR,
    SECONDS_PER_WEEK,
)
from .config import CrowdfundSettings, get_settings
from .errors import (
    AlreadyInitialized,
    CampaignCancelled,
    CampaignEnded,
    CampaignNotFound,
    CampaignStillActive,
    CrowdfundError,
    FundsAlreadyClaimed,
    GoalAlreadyReached,
    GoalNotReached,
    InvalidAmount,
    NoContribution,
    NotInitialized,
    NotOwner,
    PayoutFailed,
    ReentrantCall,
)
from .models import (
    CampaignDetails,
    CampaignEvent,
    CampaignStatus,
    DonorRow,
    EventType,
)
from .ranking import TopDonors, DEFAULT_TOP_DONOR_CAPACITY
from .registry import CampaignRegistry
from .vault import PayoutFacility, Payout, Vault

__all__ = [
    # Core
    "Campaign",
    "Phase",
    "CampaignRegistry",
    "TopDonors",
    "DEFAULT_TOP_DONOR_CAPACITY",
    # Collaborators
    "Clock",
    "ManualClock",
    "SystemClock",
    "SECONDS_PER_DAY",
    "SECONDS_PER_HOUR",
    "SECONDS_PER_WEEK",
    "PayoutFacility",
    "Payout",
    "Vault",
    # Models
    "CampaignDetails",
    "CampaignEvent",
    "CampaignStatus",
    "DonorRow",
    "EventType",
    # Config
    "CrowdfundSettings",
    "get_settings",
    # Errors
    "CrowdfundError",
    "AlreadyInitialized",
    "NotInitialized",
    "CampaignEnded",
    "CampaignCancelled",
    "CampaignStillActive",
    "GoalAlreadyReached",
    "FundsAlreadyClaimed",
    "GoalNotReached",
    "NoContribution",
    "NotOwner",
    "InvalidAmount",
    "PayoutFailed",
    "ReentrantCall",
    "CampaignNotFound",
]
