"""Ticket tier models."""

from pydantic import BaseModel, Field


class GameRequirement(BaseModel):
    """Pass threshold of the mini-game that gates a tier's claim."""

    targets_needed: int = Field(..., gt=0)
    target_interval_ms: int = Field(..., gt=0)
    time_limit_seconds: int = Field(default=15, gt=0)


# Higher tier = more targets in less time
GAME_REQUIREMENTS: dict[str, GameRequirement] = {
    "platinum": GameRequirement(targets_needed=15, target_interval_ms=700),
    "emerald": GameRequirement(targets_needed=10, target_interval_ms=1000),
    "standard": GameRequirement(targets_needed=6, target_interval_ms=1500),
}

DEFAULT_GAME_REQUIREMENT = GAME_REQUIREMENTS["standard"]


def game_requirement_for(tier_id: str) -> GameRequirement:
    """Return the mini-game threshold for a tier (standard for unknown tiers)."""
    return GAME_REQUIREMENTS.get(tier_id, DEFAULT_GAME_REQUIREMENT)


class TicketTier(BaseModel):
    """A claimable ticket category with its own stock."""

    tier_id: str = Field(..., description="Tier ID, e.g. 'platinum'")
    name: str
    description: str = ""
    stock: int = Field(..., ge=0, description="Units left to claim")
    perks: list[str] = Field(default_factory=list)
    color: str = ""
    position: int = Field(default=0, ge=0, description="Display order")

    @property
    def game(self) -> GameRequirement:
        return game_requirement_for(self.tier_id)


class TierView(TicketTier):
    """Tier as shown to guests, with the mini-game it requires."""

    game_requirement: GameRequirement

    @classmethod
    def from_tier(cls, tier: TicketTier) -> "TierView":
        return cls(**tier.model_dump(), game_requirement=tier.game)
