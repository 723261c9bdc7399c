"""
Campaign registry.

Creates campaigns, initializes them on behalf of their owner and lists
them in creation order. All campaigns share the registry's clock; each
gets its own vault so pooled balances never mix.
"""

import uuid
from typing import Callable, Optional

import structlog

from .campaign import Campaign
from .clock import Clock, SystemClock
from .config import CrowdfundSettings, get_settings
from .errors import CampaignNotFound
from .vault import PayoutFacility, Vault

logger = structlog.get_logger()


class CampaignRegistry:
    """Factory and index of deployed campaigns."""

    def __init__(
        self,
        clock: Optional[Clock] = None,
        settings: Optional[CrowdfundSettings] = None,
        vault_factory: Callable[[], PayoutFacility] = Vault,
    ):
        self.clock = clock or SystemClock()
        self.settings = settings or get_settings()
        self.vault_factory = vault_factory
        self._campaigns: dict[str, Campaign] = {}

    def __len__(self) -> int:
        return len(self._campaigns)

    def __contains__(self, campaign_id: str) -> bool:
        return campaign_id in self._campaigns

    def create_campaign(
        self,
        owner: str,
        title: str,
        description: str,
        goal: int,
        duration: int,
    ) -> Campaign:
        """Deploy and initialize a new campaign owned by ``owner``."""
        campaign = Campaign(
            clock=self.clock,
            vault=self.vault_factory(),
            top_donor_capacity=self.settings.top_donor_capacity,
            campaign_id=str(uuid.uuid4()),
        )
        campaign.initialize(owner, title, description, goal, duration)
        self._campaigns[campaign.campaign_id] = campaign

        logger.info(
            "registry.campaign_created",
            campaign_id=campaign.campaign_id,
            owner=owner,
            total_campaigns=len(self._campaigns),
        )
        return campaign

    def get_campaigns(self) -> list[str]:
        """Campaign ids in creation order."""
        return list(self._campaigns)

    def get(self, campaign_id: str) -> Campaign:
        try:
            return self._campaigns[campaign_id]
        except KeyError:
            raise CampaignNotFound(f"Unknown campaign: {campaign_id}") from None

    def campaigns_by_owner(self, owner: str) -> list[Campaign]:
        return [c for c in self._campaigns.values() if c.owner == owner]
