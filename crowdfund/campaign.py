"""
Campaign ledger and state machine.

A Campaign owns every piece of mutable state for one fund-raising effort:
the raised total, per-contributor totals, the top-donor ranking and the
terminal resolution. It resolves to exactly one monetary outcome:

- goal met: the owner withdraws the whole pooled balance once, or
- goal missed / campaign cancelled: each contributor reclaims their own
  contribution once.

The four one-way latches (goal reached, ended, cancelled, funds claimed)
are stored as a single Phase, so combinations such as "cancelled and
claimed" cannot be represented. Deadline expiry is never stored; it is
read from the clock whenever it matters.

Every mutating operation is serialized on the campaign's lock and is
all-or-nothing: checks run first, then the payout (if any), and state is
committed only after the payout succeeds. A payout that tries to call back
into a mutating operation is rejected with ReentrantCall.

Example:
    clock = ManualClock(epoch=1_700_000_000)
    campaign = Campaign(clock=clock)
    campaign.initialize("alice", "Roof", "New roof for the hall", goal=5, duration=SECONDS_PER_WEEK)
    campaign.contribute("bob", 5)
    campaign.end_campaign("alice")
    campaign.claim_funds("alice")  # pays 5 to alice
"""

import functools
import threading
import uuid
from enum import Enum
from typing import Optional

import structlog

from .clock import Clock, SystemClock
from .errors import (
    AlreadyInitialized,
    CampaignCancelled,
    CampaignEnded,
    CampaignStillActive,
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
from .models import CampaignDetails, CampaignEvent, CampaignStatus, DonorRow, EventType
from .ranking import DEFAULT_TOP_DONOR_CAPACITY, TopDonors
from .vault import PayoutFacility, Vault

logger = structlog.get_logger()


class Phase(str, Enum):
    """Stored lifecycle latch of a campaign."""

    UNINITIALIZED = "uninitialized"
    OPEN = "open"                  # accepting, goal not reached
    GOAL_REACHED = "goal_reached"  # goal reached, not explicitly ended
    ENDED = "ended"                # goal reached, ended early by the owner
    CANCELLED = "cancelled"
    CLAIMED = "claimed"            # owner withdrew the funds


_SUCCESS_PHASES = (Phase.GOAL_REACHED, Phase.ENDED, Phase.CLAIMED)


def _is_positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _mutation(method):
    """Serialize a mutating operation and reject re-entry from a payout."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            if self._mutating:
                logger.warning(
                    "campaign.reentrant_call",
                    campaign_id=self.campaign_id,
                    operation=method.__name__,
                )
                raise ReentrantCall(
                    f"{method.__name__} called while another operation is in progress",
                    campaign_id=self.campaign_id,
                )
            self._mutating = True
            try:
                return method(self, *args, **kwargs)
            finally:
                self._mutating = False

    return wrapper


def _query(method):
    """Read committed state; fails before initialization."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            self._require_initialized()
            return method(self, *args, **kwargs)

    return wrapper


class Campaign:
    """
    One fund-raising campaign: ledger plus state machine.

    Args:
        clock: Source of the current time (default: wall clock)
        vault: Value transfer facility holding the pooled balance
        top_donor_capacity: Number of donors kept in the ranking
        campaign_id: Identifier used in logs and errors
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        vault: Optional[PayoutFacility] = None,
        top_donor_capacity: int = DEFAULT_TOP_DONOR_CAPACITY,
        campaign_id: Optional[str] = None,
    ):
        self.campaign_id = campaign_id or str(uuid.uuid4())
        self.clock = clock or SystemClock()
        self.vault = vault if vault is not None else Vault()

        self._lock = threading.RLock()
        self._mutating = False

        self._phase = Phase.UNINITIALIZED
        self.owner = ""
        self.title = ""
        self.description = ""
        self.goal = 0
        self.start_time = 0
        self.end_time = 0

        self._raised_amount = 0
        self._paid_out = 0
        self._contributions: dict[str, int] = {}
        self._contributors_count = 0
        self._top_donors = TopDonors(top_donor_capacity)
        self._contribution_seq = 0
        self._reached_seq: dict[str, int] = {}

        self.events: list[CampaignEvent] = []

    # -------------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------------

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def initialized(self) -> bool:
        return self._phase != Phase.UNINITIALIZED

    @property
    def raised_amount(self) -> int:
        return self._raised_amount

    @property
    def contributors_count(self) -> int:
        return self._contributors_count

    @property
    def paid_out(self) -> int:
        return self._paid_out

    @property
    def deadline_passed(self) -> bool:
        return self.initialized and self.clock.now() >= self.end_time

    @property
    def goal_reached(self) -> bool:
        return self._phase in _SUCCESS_PHASES

    @property
    def ended(self) -> bool:
        """Explicitly ended (or claimed) or past the deadline."""
        return self._phase in (Phase.ENDED, Phase.CLAIMED) or self.deadline_passed

    @property
    def cancelled(self) -> bool:
        return self._phase == Phase.CANCELLED

    @property
    def funds_claimed(self) -> bool:
        return self._phase == Phase.CLAIMED

    @property
    def refund_eligible(self) -> bool:
        return self._phase == Phase.CANCELLED or (
            self._phase == Phase.OPEN and self.deadline_passed
        )

    @property
    def status(self) -> CampaignStatus:
        if self._phase == Phase.UNINITIALIZED:
            return CampaignStatus.UNINITIALIZED
        if self._phase == Phase.CANCELLED:
            return CampaignStatus.CANCELLED
        if self._phase == Phase.CLAIMED:
            return CampaignStatus.CLAIMED
        if self._phase == Phase.ENDED:
            return CampaignStatus.ENDED_SUCCESS
        if self.deadline_passed:
            if self._phase == Phase.GOAL_REACHED:
                return CampaignStatus.ENDED_SUCCESS
            return CampaignStatus.ENDED_FAILURE
        if self._phase == Phase.GOAL_REACHED:
            return CampaignStatus.GOAL_REACHED_OPEN
        return CampaignStatus.ACTIVE

    # -------------------------------------------------------------------------
    # Mutating operations
    # -------------------------------------------------------------------------

    @_mutation
    def initialize(
        self,
        owner: str,
        title: str,
        description: str,
        goal: int,
        duration: int,
    ) -> None:
        """Set the immutable parameters and open the campaign for contributions."""
        if self.initialized:
            raise AlreadyInitialized(campaign_id=self.campaign_id)
        if not _is_positive_int(goal):
            raise InvalidAmount("goal", goal, campaign_id=self.campaign_id)
        if not _is_positive_int(duration):
            raise InvalidAmount("duration", duration, campaign_id=self.campaign_id)

        now = self.clock.now()
        self.owner = owner
        self.title = title
        self.description = description
        self.goal = goal
        self.start_time = now
        self.end_time = now + duration
        self._phase = Phase.OPEN

        self._record(EventType.INITIALIZED, owner)
        logger.info(
            "campaign.initialized",
            campaign_id=self.campaign_id,
            owner=owner,
            goal=goal,
            end_time=self.end_time,
        )

    @_mutation
    def contribute(self, caller: str, amount: int) -> int:
        """
        Accept ``amount`` from ``caller``.

        Returns:
            The caller's cumulative contribution after this call.
        """
        self._require_initialized()
        if self._phase == Phase.CANCELLED:
            raise CampaignCancelled(campaign_id=self.campaign_id)
        if self._phase in (Phase.ENDED, Phase.CLAIMED) or self.deadline_passed:
            raise CampaignEnded(campaign_id=self.campaign_id)
        if not _is_positive_int(amount):
            raise InvalidAmount("amount", amount, campaign_id=self.campaign_id)

        self.vault.deposit(caller, amount)

        first_contribution = caller not in self._contributions
        total = self._contributions.get(caller, 0) + amount
        self._contributions[caller] = total
        if first_contribution:
            self._contributors_count += 1
        self._raised_amount += amount
        self._contribution_seq += 1
        self._reached_seq[caller] = self._contribution_seq
        self._top_donors.update(caller, total, self._contribution_seq)

        self._record(EventType.CONTRIBUTION, caller, amount)
        logger.info(
            "campaign.contribution_received",
            campaign_id=self.campaign_id,
            contributor=caller,
            amount=amount,
            total=total,
            raised=self._raised_amount,
        )

        if self._phase == Phase.OPEN and self._raised_amount >= self.goal:
            self._phase = Phase.GOAL_REACHED
            self._record(EventType.GOAL_REACHED, caller)
            logger.info(
                "campaign.goal_reached",
                campaign_id=self.campaign_id,
                goal=self.goal,
                raised=self._raised_amount,
            )

        return total

    @_mutation
    def cancel_campaign(self, caller: str) -> None:
        """Owner-only: cancel an unsuccessful campaign, opening refunds."""
        self._require_owner(caller)
        if self._phase == Phase.CLAIMED:
            raise FundsAlreadyClaimed(campaign_id=self.campaign_id)
        if self._phase in _SUCCESS_PHASES:
            raise GoalAlreadyReached(campaign_id=self.campaign_id)
        if self._phase == Phase.CANCELLED:
            raise CampaignCancelled(campaign_id=self.campaign_id)

        self._phase = Phase.CANCELLED
        self._record(EventType.CANCELLED, caller)
        logger.info("campaign.cancelled", campaign_id=self.campaign_id, raised=self._raised_amount)

    @_mutation
    def end_campaign(self, caller: str) -> None:
        """Owner-only: end a successful campaign before its deadline."""
        self._require_owner(caller)
        if self._phase == Phase.CANCELLED:
            raise CampaignCancelled(campaign_id=self.campaign_id)
        if self._phase == Phase.OPEN:
            raise GoalNotReached(campaign_id=self.campaign_id)
        if self._phase in (Phase.ENDED, Phase.CLAIMED):
            raise CampaignEnded(campaign_id=self.campaign_id)

        self._phase = Phase.ENDED
        self._record(EventType.ENDED, caller)
        logger.info("campaign.ended_early", campaign_id=self.campaign_id, now=self.clock.now())

    @_mutation
    def claim_funds(self, caller: str) -> int:
        """
        Owner-only: withdraw the whole pooled balance of a successful campaign.

        Returns:
            The amount paid to the owner.
        """
        self._require_owner(caller)
        if self._phase == Phase.CLAIMED:
            raise FundsAlreadyClaimed(campaign_id=self.campaign_id)
        if self._phase == Phase.CANCELLED:
            raise CampaignCancelled(campaign_id=self.campaign_id)
        if self._phase == Phase.OPEN:
            raise GoalNotReached(campaign_id=self.campaign_id)
        if self._phase == Phase.GOAL_REACHED and not self.deadline_passed:
            raise CampaignStillActive(campaign_id=self.campaign_id)

        amount = self.vault.balance
        self._pay(self.owner, amount)

        self._paid_out += amount
        self._phase = Phase.CLAIMED
        self._record(EventType.FUNDS_CLAIMED, caller, amount)
        logger.info("campaign.funds_claimed", campaign_id=self.campaign_id, owner=caller, amount=amount)
        return amount

    @_mutation
    def claim_refund(self, caller: str) -> int:
        """
        Reclaim the caller's whole contribution from a failed or cancelled
        campaign. One-shot: the recorded contribution is zeroed.

        Returns:
            The amount refunded.
        """
        self._require_initialized()
        amount = self._contributions.get(caller, 0)
        if amount == 0:
            raise NoContribution(campaign_id=self.campaign_id)
        if self._phase in _SUCCESS_PHASES:
            raise GoalAlreadyReached(campaign_id=self.campaign_id)
        if not self.refund_eligible:
            raise CampaignStillActive(campaign_id=self.campaign_id)

        self._pay(caller, amount)

        self._contributions[caller] = 0
        self._paid_out += amount
        self._drop_from_ranking(caller)
        self._record(EventType.REFUND_CLAIMED, caller, amount)
        logger.info("campaign.refund_claimed", campaign_id=self.campaign_id, contributor=caller, amount=amount)
        return amount

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @_query
    def get_campaign_details(self) -> CampaignDetails:
        return CampaignDetails(
            owner=self.owner,
            title=self.title,
            description=self.description,
            goal=self.goal,
            raised_amount=self._raised_amount,
            start_time=self.start_time,
            end_time=self.end_time,
            goal_reached=self.goal_reached,
            funds_claimed=self.funds_claimed,
            cancelled=self.cancelled,
            ended=self.ended,
            contributors_count=self._contributors_count,
            status=self.status,
        )

    @_query
    def get_total_contribution(self, identity: str) -> int:
        return self._contributions.get(identity, 0)

    @_query
    def get_claimable_amount(self, identity: str) -> int:
        """
        Amount ``identity`` gets back if the campaign does not succeed.

        Zero once the goal is reached (refunds never apply) and zero after
        the identity has been refunded. While the campaign is still open the
        amount is reported even though claim_refund is not yet allowed.
        """
        if self._phase in _SUCCESS_PHASES:
            return 0
        return self._contributions.get(identity, 0)

    @_query
    def get_top_donors(self) -> list[str]:
        return self._top_donors.identities()

    @_query
    def get_top_donor_rows(self) -> list[DonorRow]:
        return [
            DonorRow(rank=rank, identity=identity, amount=amount)
            for rank, (identity, amount) in enumerate(self._top_donors.amounts(), start=1)
        ]

    @_query
    def progress_pct(self) -> int:
        """Share of the goal raised so far, capped at 100."""
        return min(100, self._raised_amount * 100 // self.goal)

    @_query
    def time_remaining(self) -> int:
        """Seconds until the deadline, 0 once it has passed."""
        return max(0, self.end_time - self.clock.now())

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _require_initialized(self) -> None:
        if not self.initialized:
            raise NotInitialized(campaign_id=self.campaign_id)

    def _require_owner(self, caller: str) -> None:
        self._require_initialized()
        if caller != self.owner:
            logger.warning("campaign.not_owner", campaign_id=self.campaign_id, caller=caller)
            raise NotOwner(caller, campaign_id=self.campaign_id)

    def _pay(self, recipient: str, amount: int) -> None:
        try:
            self.vault.transfer(recipient, amount)
        except PayoutFailed as ex:
            ex.campaign_id = self.campaign_id
            logger.warning(
                "campaign.payout_failed",
                campaign_id=self.campaign_id,
                recipient=recipient,
                amount=amount,
                reason=ex.reason,
            )
            raise

    def _drop_from_ranking(self, identity: str) -> None:
        """
        Remove a refunded identity and refill the freed slot from the
        remaining positive totals. Refunds only happen once contributions
        have stopped, so the rescan runs at most once per ranked donor.
        """
        if not self._top_donors.remove(identity):
            return
        for other, total in self._contributions.items():
            if total > 0 and other not in self._top_donors:
                self._top_donors.update(other, total, self._reached_seq[other])
        logger.debug(
            "ranking.refund_removed",
            campaign_id=self.campaign_id,
            identity=identity,
            ranked=len(self._top_donors),
        )

    def _record(self, event_type: EventType, actor: str, amount: Optional[int] = None) -> None:
        self.events.append(
            CampaignEvent(
                seq=len(self.events) + 1,
                event_type=event_type,
                timestamp=self.clock.now(),
                actor=actor,
                amount=amount,
            )
        )
