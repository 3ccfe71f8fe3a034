"""Protocol trust data models."""

from datetime import date
from enum import Enum

from pydantic import BaseModel, Field


class TrustLevel(str, Enum):
    """Coarse trust tier for a protocol."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ProtocolRisk(BaseModel):
    """Curated security and trust facts about a protocol."""

    slug: str
    name: str
    audited: bool
    auditors: list[str] = Field(default_factory=list)
    open_source: bool
    program_upgradeable: bool
    upgrade_authority: str = Field(description="multisig, dao, single, or immutable")
    team_known: bool
    vc_backed: bool
    backers: list[str] = Field(default_factory=list)
    launch_date: date
    oracle_dependency: list[str] = Field(default_factory=list)
    has_insurance: bool = False
    validator_count: int | None = None
    validator_concentration: float | None = Field(
        default=None, description="Share of stake held by the top 3 validators (percent)"
    )
    overall_trust: TrustLevel
    risk_notes: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class ProtocolTrust(BaseModel):
    """Registry entry with its computed trust score."""

    protocol: ProtocolRisk
    trust_score: int = Field(ge=0, le=100)
    trust_level: TrustLevel
