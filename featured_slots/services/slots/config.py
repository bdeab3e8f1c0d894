# featured_slots/services/slots/config.py
"""
Per-tier slot pool configuration.
"""

from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from zoneinfo import ZoneInfo

from featured_slots.core.config import settings
from featured_slots.schemas.slot import SlotTier, SlotPoolConfigResponse
from featured_slots.utils.time_utils import get_zone

MIN_DURATION_HOURS = 1
MAX_DURATION_HOURS = 168  # 1 week

# Requested starts further than this from now are rejected
MAX_LEAD_TIME = timedelta(days=3650)


@dataclass(frozen=True)
class SlotPoolConfig:
    """
    Configuration for one slot pool.

    Attributes:
        tier: Which pool this config belongs to
        max_concurrent: Hard cap on simultaneously active slots
        default_duration_hours: Used when a request omits its duration
        timezone: IANA zone for reading wall-clock input and display only
        recent_ended_window_hours: How long an ended slot stays in "recent-ended"
    """
    tier: SlotTier
    max_concurrent: int = 3
    default_duration_hours: int = 48
    timezone: str = "Europe/Paris"
    recent_ended_window_hours: int = 48

    def __post_init__(self):
        """Validate configuration."""
        if self.max_concurrent < 1:
            raise ValueError(f"max_concurrent must be >= 1, got {self.max_concurrent}")
        if not MIN_DURATION_HOURS <= self.default_duration_hours <= MAX_DURATION_HOURS:
            raise ValueError(
                f"default_duration_hours must be between {MIN_DURATION_HOURS} and "
                f"{MAX_DURATION_HOURS}, got {self.default_duration_hours}"
            )
        if self.recent_ended_window_hours < 0:
            raise ValueError(
                f"recent_ended_window_hours must be >= 0, got {self.recent_ended_window_hours}"
            )
        get_zone(self.timezone)

    @property
    def zone(self) -> ZoneInfo:
        return get_zone(self.timezone)

    @property
    def recent_ended_window(self) -> timedelta:
        return timedelta(hours=self.recent_ended_window_hours)

    def to_response(self) -> SlotPoolConfigResponse:
        return SlotPoolConfigResponse(
            tier=self.tier,
            max_concurrent=self.max_concurrent,
            default_duration_hours=self.default_duration_hours,
            timezone=self.timezone,
            recent_ended_window_hours=self.recent_ended_window_hours,
        )


@lru_cache
def get_pool_config(tier: SlotTier) -> SlotPoolConfig:
    """Get the configuration for a tier (cached per process)."""
    tier = SlotTier(tier)
    if tier is SlotTier.SPOTLIGHT:
        return SlotPoolConfig(
            tier=tier,
            max_concurrent=settings.SPOTLIGHT_MAX_CONCURRENT,
            default_duration_hours=settings.SPOTLIGHT_DEFAULT_DURATION_HOURS,
            timezone=settings.SLOT_TIMEZONE,
            recent_ended_window_hours=settings.SPOTLIGHT_RECENT_ENDED_WINDOW_HOURS,
        )
    return SlotPoolConfig(
        tier=tier,
        max_concurrent=settings.PROMOTED_MAX_CONCURRENT,
        default_duration_hours=settings.PROMOTED_DEFAULT_DURATION_HOURS,
        timezone=settings.SLOT_TIMEZONE,
        recent_ended_window_hours=settings.PROMOTED_RECENT_ENDED_WINDOW_HOURS,
    )
