"""Tests for scripted campaign replays and the reference scenarios."""

import json

import pytest
from pydantic import ValidationError

from crowdfund.clock import SECONDS_PER_WEEK
from crowdfund.models import CampaignStatus
from crowdfund.replay import DEMO_SCRIPTS, ReplayScript, Step, run_script


def _results(outcome):
    return [(r.step.op, r.ok, r.error) for r in outcome.results]


class TestReferenceScenarios:
    """The three reference scenarios replay as documented."""

    def test_deadline_refund(self, settings):
        """A=1, B=2, deadline passes, A refunds once."""
        outcome = run_script(DEMO_SCRIPTS["deadline-refund"], settings)
        assert _results(outcome) == [
            ("contribute", True, None),
            ("contribute", True, None),
            ("advance", True, None),
            ("claim_refund", True, None),
            ("claim_refund", False, "NoContribution"),
        ]
        assert outcome.results[3].value == 1
        assert outcome.vault.credited["A"] == 1
        assert outcome.campaign.get_campaign_details().goal_reached is False

    def test_early_end_claim(self, settings):
        """A=5, cancel refused, end, claim 5, re-claim refused."""
        outcome = run_script(DEMO_SCRIPTS["early-end-claim"], settings)
        assert _results(outcome) == [
            ("contribute", True, None),
            ("cancel", False, "GoalAlreadyReached"),
            ("end", True, None),
            ("claim_funds", True, None),
            ("claim_funds", False, "FundsAlreadyClaimed"),
        ]
        assert outcome.vault.credited["owner"] == 5
        details = outcome.campaign.get_campaign_details()
        assert details.ended is True
        assert details.funds_claimed is True

    def test_cancel_refunds(self, settings):
        """Cancelled campaign refunds A and B exactly; C has nothing."""
        outcome = run_script(DEMO_SCRIPTS["cancel-refunds"], settings)
        assert [r.error for r in outcome.failures] == ["NoContribution"]
        assert outcome.vault.credited["A"] == 1
        assert outcome.vault.credited["B"] == 2
        assert outcome.vault.balance == 0
        assert outcome.campaign.status == CampaignStatus.CANCELLED


class TestReplayScript:
    """Tests for script parsing and replay."""

    def test_from_file(self, tmp_path, settings):
        """Scripts load from JSON files."""
        path = tmp_path / "script.json"
        path.write_text(json.dumps({
            "name": "file-script",
            "epoch": 1000,
            "campaign": {"owner": "alice", "goal": 3, "duration": 60},
            "steps": [
                {"op": "contribute", "caller": "bob", "amount": 3},
                {"op": "advance", "seconds": 60},
                {"op": "claim_funds", "caller": "alice"},
            ],
        }))
        script = ReplayScript.from_file(path)
        outcome = run_script(script, settings)
        assert outcome.failures == []
        assert outcome.clock.now() == 1060
        assert outcome.campaign.campaign_id == "file-script"
        assert outcome.vault.credited["alice"] == 3

    def test_duration_defaults_to_week(self):
        """Omitted duration means one week."""
        script = ReplayScript.model_validate({"campaign": {"owner": "a", "goal": 1}})
        assert script.campaign.duration == SECONDS_PER_WEEK

    @pytest.mark.parametrize("step", [
        {"op": "advance"},
        {"op": "contribute", "caller": "a"},
        {"op": "claim_refund"},
        {"op": "withdraw", "caller": "a"},
        {"op": "advance", "seconds": -5},
    ])
    def test_invalid_steps(self, step):
        """Steps missing their arguments are rejected."""
        with pytest.raises(ValidationError):
            Step.model_validate(step)

    def test_invalid_goal(self):
        """Scripts cannot describe an invalid campaign."""
        with pytest.raises(ValidationError):
            ReplayScript.model_validate({"campaign": {"owner": "a", "goal": 0}})

    def test_describe(self):
        """Steps render a short human description."""
        assert Step(op="contribute", caller="a", amount=2).describe() == "a contributes 2"
        assert Step(op="advance", seconds=5).describe() == "advance 5s"
        assert Step(op="claim_refund", caller="a").describe() == "a claim refund"

    def test_invalid_amount_is_reported(self, settings):
        """A rejected contribution is recorded, not raised."""
        script = ReplayScript.model_validate({
            "campaign": {"owner": "a", "goal": 1},
            "steps": [{"op": "contribute", "caller": "b", "amount": 0}],
        })
        outcome = run_script(script, settings)
        assert outcome.failures[0].error == "InvalidAmount"
        assert "amount must be a positive integer" in outcome.failures[0].message
