"""
Error taxonomy for the campaign ledger.

Every failure is a business-rule violation raised synchronously to the
caller. None of them is transient and none leaves the ledger half-updated:
the campaign stays usable for every operation that is still valid.
"""

from typing import Optional


class CrowdfundError(Exception):
    """Base class for all campaign ledger errors."""

    def __init__(self, message: Optional[str] = None, campaign_id: Optional[str] = None):
        super().__init__(message or self.__class__.__name__)
        self.campaign_id = campaign_id


class AlreadyInitialized(CrowdfundError):
    """Campaign was initialized more than once."""


class NotInitialized(CrowdfundError):
    """Operation attempted before the campaign was initialized."""


class CampaignEnded(CrowdfundError):
    """Contribution after the deadline or after an explicit end."""


class CampaignCancelled(CrowdfundError):
    """Operation forbidden because the owner cancelled the campaign."""


class CampaignStillActive(CrowdfundError):
    """Claim attempted while the campaign can still accept contributions."""


class GoalAlreadyReached(CrowdfundError):
    """Operation invalid because the campaign already succeeded."""


class FundsAlreadyClaimed(GoalAlreadyReached):
    """The owner already withdrew the raised funds.

    Subclasses GoalAlreadyReached so callers matching on the broader
    "success already consumed" condition keep working.
    """


class GoalNotReached(CrowdfundError):
    """Fund claim or early end attempted before the goal was met."""


class NoContribution(CrowdfundError):
    """Refund attempted with nothing left to refund."""


class NotOwner(CrowdfundError):
    """Non-owner invoked an owner-only operation."""

    def __init__(self, caller: str, campaign_id: Optional[str] = None):
        super().__init__("Not owner", campaign_id=campaign_id)
        self.caller = caller


class InvalidAmount(CrowdfundError, ValueError):
    """Amount, goal or duration is not a positive integer."""

    def __init__(self, field: str, value, campaign_id: Optional[str] = None):
        super().__init__(f"{field} must be a positive integer, got {value!r}", campaign_id=campaign_id)
        self.field = field
        self.value = value


class PayoutFailed(CrowdfundError):
    """The value transfer facility rejected an outbound transfer."""

    def __init__(self, recipient: str, amount: int, reason: str):
        super().__init__(f"Payout of {amount} to {recipient} failed: {reason}")
        self.recipient = recipient
        self.amount = amount
        self.reason = reason


class ReentrantCall(CrowdfundError):
    """A payout tried to mutate the ledger before its operation finished."""


class CampaignNotFound(CrowdfundError, KeyError):
    """Registry lookup for an unknown campaign id."""

    def __str__(self) -> str:
        return self.args[0]
