"""Tests for the campaign registry."""

import pytest

from crowdfund.clock import SECONDS_PER_WEEK
from crowdfund.config import CrowdfundSettings
from crowdfund.errors import CampaignNotFound, InvalidAmount
from crowdfund.registry import CampaignRegistry


class TestCampaignRegistry:
    """Tests for CampaignRegistry."""

    @pytest.fixture
    def registry(self, clock, settings):
        return CampaignRegistry(clock=clock, settings=settings)

    def test_create_campaign(self, registry, clock):
        """Created campaigns are initialized and owned by the creator."""
        campaign = registry.create_campaign("alice", "Roof", "New roof", 100, SECONDS_PER_WEEK)
        details = campaign.get_campaign_details()
        assert details.owner == "alice"
        assert details.start_time == clock.now()
        assert campaign.campaign_id in registry
        assert len(registry) == 1

    def test_listing_in_creation_order(self, registry):
        """get_campaigns lists ids oldest first."""
        first = registry.create_campaign("alice", "A", "", 1, 10)
        second = registry.create_campaign("bob", "B", "", 1, 10)
        assert registry.get_campaigns() == [first.campaign_id, second.campaign_id]
        assert registry.get(second.campaign_id) is second

    def test_unknown_campaign(self, registry):
        """Lookups of unknown ids raise CampaignNotFound (a KeyError)."""
        with pytest.raises(CampaignNotFound):
            registry.get("missing")
        with pytest.raises(KeyError):
            registry.get("missing")

    def test_invalid_campaign_not_registered(self, registry):
        """A campaign that fails initialization is not listed."""
        with pytest.raises(InvalidAmount):
            registry.create_campaign("alice", "Bad", "", 0, 10)
        assert registry.get_campaigns() == []

    def test_separate_vaults(self, registry):
        """Each campaign pools its own funds."""
        a = registry.create_campaign("alice", "A", "", 5, 10)
        b = registry.create_campaign("bob", "B", "", 5, 10)
        a.contribute("carol", 3)
        assert a.vault.balance == 3
        assert b.vault.balance == 0

    def test_shared_clock(self, registry, clock):
        """All campaigns see the registry clock."""
        a = registry.create_campaign("alice", "A", "", 5, 10)
        clock.advance(10)
        assert a.deadline_passed

    def test_capacity_from_settings(self, clock):
        """Top donor capacity follows settings."""
        registry = CampaignRegistry(clock=clock, settings=CrowdfundSettings(_env_file=None, top_donor_capacity=1))
        campaign = registry.create_campaign("alice", "A", "", 50, 10)
        campaign.contribute("x", 1)
        campaign.contribute("y", 2)
        assert campaign.get_top_donors() == ["y"]

    def test_campaigns_by_owner(self, registry):
        """Campaigns can be filtered by owner."""
        registry.create_campaign("alice", "A", "", 5, 10)
        registry.create_campaign("bob", "B", "", 5, 10)
        registry.create_campaign("alice", "C", "", 5, 10)
        assert [c.title for c in registry.campaigns_by_owner("alice")] == ["A", "C"]
