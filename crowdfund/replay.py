"""
Scripted campaign replays.

A replay script describes one campaign and a sequence of operations
against it on a manual clock:

    {
      "epoch": 1700000000,
      "campaign": {"owner": "alice", "goal": 5, "duration": 604800},
      "steps": [
        {"op": "contribute", "caller": "bob", "amount": 2},
        {"op": "advance", "seconds": 604801},
        {"op": "claim_refund", "caller": "bob"}
      ]
    }

Failing steps are recorded and the replay carries on, since a business
rule violation never damages the ledger.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Optional

import structlog
from pydantic import BaseModel, Field, model_validator

from .campaign import Campaign
from .clock import SECONDS_PER_WEEK, ManualClock
from .config import CrowdfundSettings, get_settings
from .errors import CrowdfundError
from .vault import Vault

logger = structlog.get_logger()


Operation = Literal["contribute", "cancel", "end", "claim_funds", "claim_refund", "advance"]


class CampaignParams(BaseModel):
    """Arguments to Campaign.initialize."""

    owner: str
    title: str = "Untitled campaign"
    description: str = ""
    goal: int = Field(gt=0)
    duration: int = Field(default=SECONDS_PER_WEEK, gt=0)


class Step(BaseModel):
    """One operation in a replay script."""

    op: Operation
    caller: Optional[str] = None
    amount: Optional[int] = None
    seconds: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def check_arguments(self) -> "Step":
        if self.op == "advance":
            if self.seconds is None:
                raise ValueError("advance step needs 'seconds'")
            return self
        if not self.caller:
            raise ValueError(f"{self.op} step needs 'caller'")
        if self.op == "contribute" and self.amount is None:
            raise ValueError("contribute step needs 'amount'")
        return self

    def describe(self) -> str:
        if self.op == "advance":
            return f"advance {self.seconds}s"
        if self.op == "contribute":
            return f"{self.caller} contributes {self.amount}"
        return f"{self.caller} {self.op.replace('_', ' ')}"


class ReplayScript(BaseModel):
    """A campaign plus the operations to run against it."""

    name: str = "replay"
    epoch: int = Field(default=0, ge=0)
    campaign: CampaignParams
    steps: list[Step] = Field(default_factory=list)

    @classmethod
    def from_file(cls, path: Path) -> "ReplayScript":
        return cls.model_validate_json(Path(path).read_text(encoding="utf-8"))


@dataclass
class StepResult:
    """Outcome of a single replayed step."""

    index: int
    step: Step
    ok: bool
    value: Optional[int] = None
    error: Optional[str] = None
    message: Optional[str] = None


@dataclass
class ReplayOutcome:
    """Final campaign plus the per-step results."""

    campaign: Campaign
    clock: ManualClock
    results: list[StepResult] = field(default_factory=list)

    @property
    def failures(self) -> list[StepResult]:
        return [r for r in self.results if not r.ok]

    @property
    def vault(self) -> Vault:
        return self.campaign.vault


def _apply(campaign: Campaign, clock: ManualClock, step: Step) -> Optional[int]:
    if step.op == "advance":
        return clock.advance(step.seconds)
    if step.op == "contribute":
        return campaign.contribute(step.caller, step.amount)
    if step.op == "cancel":
        return campaign.cancel_campaign(step.caller)
    if step.op == "end":
        return campaign.end_campaign(step.caller)
    if step.op == "claim_funds":
        return campaign.claim_funds(step.caller)
    return campaign.claim_refund(step.caller)


def run_script(script: ReplayScript, settings: Optional[CrowdfundSettings] = None) -> ReplayOutcome:
    """Build the scripted campaign on a fresh manual clock and replay every step."""
    settings = settings or get_settings()
    clock = ManualClock(epoch=script.epoch)
    campaign = Campaign(
        clock=clock,
        vault=Vault(),
        top_donor_capacity=settings.top_donor_capacity,
        campaign_id=script.name,
    )
    params = script.campaign
    campaign.initialize(params.owner, params.title, params.description, params.goal, params.duration)

    outcome = ReplayOutcome(campaign=campaign, clock=clock)
    for index, step in enumerate(script.steps, start=1):
        try:
            value = _apply(campaign, clock, step)
        except CrowdfundError as ex:
            logger.info("replay.step_failed", script=script.name, index=index, op=step.op, error=type(ex).__name__)
            outcome.results.append(
                StepResult(index=index, step=step, ok=False, error=type(ex).__name__, message=str(ex))
            )
        else:
            outcome.results.append(StepResult(index=index, step=step, ok=True, value=value))

    logger.info(
        "replay.completed",
        script=script.name,
        steps=len(script.steps),
        failures=len(outcome.failures),
    )
    return outcome


def _script(name: str, steps: list[dict], goal: int = 5) -> ReplayScript:
    return ReplayScript(
        name=name,
        epoch=1_700_000_000,
        campaign=CampaignParams(
            owner="owner",
            title=name.replace("-", " ").title(),
            description="Reference scenario",
            goal=goal,
            duration=SECONDS_PER_WEEK,
        ),
        steps=[Step(**s) for s in steps],
    )


DEMO_SCRIPTS: dict[str, ReplayScript] = {
    "deadline-refund": _script(
        "deadline-refund",
        [
            {"op": "contribute", "caller": "A", "amount": 1},
            {"op": "contribute", "caller": "B", "amount": 2},
            {"op": "advance", "seconds": SECONDS_PER_WEEK + 1},
            {"op": "claim_refund", "caller": "A"},
            {"op": "claim_refund", "caller": "A"},
        ],
    ),
    "early-end-claim": _script(
        "early-end-claim",
        [
            {"op": "contribute", "caller": "A", "amount": 5},
            {"op": "cancel", "caller": "owner"},
            {"op": "end", "caller": "owner"},
            {"op": "claim_funds", "caller": "owner"},
            {"op": "claim_funds", "caller": "owner"},
        ],
    ),
    "cancel-refunds": _script(
        "cancel-refunds",
        [
            {"op": "contribute", "caller": "A", "amount": 1},
            {"op": "contribute", "caller": "B", "amount": 2},
            {"op": "cancel", "caller": "owner"},
            {"op": "claim_refund", "caller": "A"},
            {"op": "claim_refund", "caller": "B"},
            {"op": "claim_refund", "caller": "C"},
        ],
    ),
}
