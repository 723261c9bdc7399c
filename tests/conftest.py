"""Shared pytest fixtures and configuration."""

import pytest
import structlog

from crowdfund.campaign import Campaign
from crowdfund.clock import SECONDS_PER_WEEK, ManualClock
from crowdfund.config import CrowdfundSettings
from crowdfund.vault import Vault


EPOCH = 1_700_000_000
WEEK = SECONDS_PER_WEEK

FIVE = 5

OWNER = "owner"


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo configure_logging so no test logs into another test's captured stream."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def clock():
    """Manual clock starting at a fixed epoch."""
    return ManualClock(epoch=EPOCH)


@pytest.fixture
def vault():
    """Empty in-memory vault."""
    return Vault()


@pytest.fixture
def campaign(clock, vault):
    """Initialized campaign: goal 5, one week, owned by OWNER."""
    campaign = Campaign(clock=clock, vault=vault, campaign_id="test-campaign")
    campaign.initialize(OWNER, "Test Campaign", "Test Description", FIVE, WEEK)
    return campaign


@pytest.fixture
def settings():
    """Settings isolated from the environment."""
    return CrowdfundSettings(_env_file=None)


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "slow: long-running property tests")
