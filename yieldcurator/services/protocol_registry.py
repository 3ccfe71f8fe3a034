"""Curated protocol trust registry."""

from datetime import date
from types import MappingProxyType
from typing import Iterable, Mapping

from yieldcurator.logger import get_logger
from yieldcurator.models.protocol import ProtocolRisk, ProtocolTrust, TrustLevel

logger = get_logger(__name__)


# Manually researched; last reviewed January 2025
DEFAULT_PROTOCOLS: tuple[ProtocolRisk, ...] = (
    ProtocolRisk(
        slug="kamino",
        name="Kamino Finance",
        audited=True,
        auditors=["OtterSec", "Neodyme"],
        open_source=True,
        program_upgradeable=True,
        upgrade_authority="multisig",
        team_known=True,
        vc_backed=True,
        backers=["Multicoin Capital", "Pantera Capital", "Coinbase Ventures"],
        launch_date=date(2023, 3, 1),
        oracle_dependency=["Pyth"],
        overall_trust=TrustLevel.HIGH,
        risk_notes=[
            "Multiple audits completed",
            "Strong VC backing and known team",
            "Rapidly growing TVL indicates market confidence",
        ],
    ),
    ProtocolRisk(
        slug="marginfi",
        name="marginfi",
        audited=True,
        auditors=["OtterSec", "Zellic"],
        open_source=True,
        program_upgradeable=True,
        upgrade_authority="multisig",
        team_known=True,
        vc_backed=True,
        backers=["Multicoin Capital", "Pantera Capital", "Solana Ventures"],
        launch_date=date(2023, 4, 1),
        oracle_dependency=["Pyth", "Switchboard"],
        overall_trust=TrustLevel.HIGH,
        risk_notes=[
            "Dual oracle setup for price feed redundancy",
            "Active governance and transparent operations",
        ],
    ),
    ProtocolRisk(
        slug="save",
        name="Save (Solend)",
        audited=True,
        auditors=["Kudelski Security", "OtterSec"],
        open_source=True,
        program_upgradeable=True,
        upgrade_authority="dao",
        team_known=True,
        vc_backed=True,
        backers=["Polychain Capital", "Dragonfly", "Race Capital"],
        launch_date=date(2021, 8, 1),
        oracle_dependency=["Pyth", "Switchboard"],
        overall_trust=TrustLevel.HIGH,
        risk_notes=[
            "One of the oldest Solana lending protocols",
            "DAO-governed upgrade authority",
            "Survived 2022 market stress events",
        ],
    ),
    ProtocolRisk(
        slug="meteora",
        name="Meteora",
        audited=True,
        auditors=["OtterSec", "Offside Labs"],
        open_source=True,
        program_upgradeable=True,
        upgrade_authority="multisig",
        team_known=True,
        vc_backed=True,
        backers=["Jump Crypto"],
        launch_date=date(2022, 12, 1),
        oracle_dependency=["Pyth"],
        overall_trust=TrustLevel.HIGH,
        risk_notes=[
            "Dynamic liquidity market maker (DLMM) technology",
            "Higher IL risk due to concentrated liquidity",
        ],
    ),
    ProtocolRisk(
        slug="raydium",
        name="Raydium",
        audited=True,
        auditors=["Kudelski Security", "MadShield"],
        open_source=True,
        program_upgradeable=True,
        upgrade_authority="multisig",
        team_known=False,
        vc_backed=True,
        backers=["DeFiance Capital", "CMS Holdings"],
        launch_date=date(2021, 2, 1),
        overall_trust=TrustLevel.MEDIUM,
        risk_notes=[
            "One of the oldest Solana AMMs",
            "Team is pseudonymous",
        ],
    ),
    ProtocolRisk(
        slug="orca",
        name="Orca",
        audited=True,
        auditors=["Kudelski Security", "Neodyme"],
        open_source=True,
        program_upgradeable=True,
        upgrade_authority="multisig",
        team_known=True,
        vc_backed=True,
        backers=["Polychain Capital", "Placeholder VC"],
        launch_date=date(2021, 2, 1),
        oracle_dependency=["Pyth"],
        overall_trust=TrustLevel.HIGH,
        risk_notes=[
            "Whirlpools concentrated liquidity innovation",
            "Known and respected team",
        ],
    ),
    ProtocolRisk(
        slug="jupiter",
        name="Jupiter",
        audited=True,
        auditors=["OtterSec", "Offside Labs"],
        open_source=True,
        program_upgradeable=True,
        upgrade_authority="multisig",
        team_known=True,
        vc_backed=False,
        launch_date=date(2021, 10, 1),
        oracle_dependency=["Multiple (aggregated)"],
        overall_trust=TrustLevel.HIGH,
        risk_notes=[
            "Dominant swap aggregator on Solana",
            "Self-funded, no VC backing",
        ],
    ),
    ProtocolRisk(
        slug="jito",
        name="Jito",
        audited=True,
        auditors=["OtterSec", "Neodyme"],
        open_source=True,
        program_upgradeable=True,
        upgrade_authority="multisig",
        team_known=True,
        vc_backed=True,
        backers=["Multicoin Capital", "Framework Ventures"],
        launch_date=date(2022, 11, 1),
        validator_count=200,
        validator_concentration=15,
        overall_trust=TrustLevel.HIGH,
        risk_notes=[
            "MEV-powered liquid staking provides additional yield",
            "Leading LST by market share",
        ],
    ),
    ProtocolRisk(
        slug="marinade",
        name="Marinade Finance",
        audited=True,
        auditors=["Neodyme", "Ackee Blockchain"],
        open_source=True,
        program_upgradeable=True,
        upgrade_authority="dao",
        team_known=True,
        vc_backed=True,
        backers=["Coinbase Ventures", "Solana Foundation"],
        launch_date=date(2021, 8, 1),
        validator_count=450,
        validator_concentration=8,
        overall_trust=TrustLevel.HIGH,
        risk_notes=[
            "Best validator decentralization among LSTs",
            "Long track record of secure operations",
        ],
    ),
    ProtocolRisk(
        slug="sanctum",
        name="Sanctum",
        audited=True,
        auditors=["OtterSec"],
        open_source=True,
        program_upgradeable=True,
        upgrade_authority="multisig",
        team_known=True,
        vc_backed=True,
        backers=["Dragonfly", "Solana Ventures"],
        launch_date=date(2024, 1, 1),
        oracle_dependency=["Pyth"],
        overall_trust=TrustLevel.MEDIUM,
        risk_notes=[
            "Newer protocol - less battle-tested",
            "Enables instant unstaking across LSTs",
        ],
    ),
    ProtocolRisk(
        slug="drift",
        name="Drift Protocol",
        audited=True,
        auditors=["OtterSec", "Zellic"],
        open_source=True,
        program_upgradeable=True,
        upgrade_authority="multisig",
        team_known=True,
        vc_backed=True,
        backers=["Multicoin Capital", "Jump Crypto"],
        launch_date=date(2021, 11, 1),
        oracle_dependency=["Pyth"],
        overall_trust=TrustLevel.HIGH,
        risk_notes=[
            "Leading perpetuals protocol on Solana",
            "Also offers spot trading and lending",
        ],
    ),
    ProtocolRisk(
        slug="solblaze",
        name="SolBlaze",
        audited=True,
        auditors=["Halborn"],
        open_source=True,
        program_upgradeable=True,
        upgrade_authority="multisig",
        team_known=False,
        vc_backed=False,
        launch_date=date(2022, 9, 1),
        validator_count=200,
        validator_concentration=12,
        overall_trust=TrustLevel.MEDIUM,
        risk_notes=[
            "Community-driven liquid staking",
            "Pseudonymous team",
        ],
    ),
)


def normalize_slug(protocol: str) -> str:
    """Lower-case a protocol name and join words with dashes."""
    return "-".join(protocol.strip().lower().split())


def trust_score(entry: ProtocolRisk, as_of: date | None = None) -> int:
    """Score a protocol's trustworthiness from 0 to 100."""
    as_of = as_of or date.today()
    score = 50

    # Security
    if entry.audited:
        score += 15
    if len(entry.auditors) >= 2:
        score += 5
    if entry.open_source:
        score += 5
    if entry.upgrade_authority in ("dao", "multisig"):
        score += 5

    # Team and backing
    if entry.team_known:
        score += 10
    if entry.vc_backed:
        score += 5
    if len(entry.backers) >= 2:
        score += 5

    # Track record
    age_months = (as_of - entry.launch_date).days / 30
    if age_months >= 24:
        score += 10
    elif age_months >= 12:
        score += 5

    # Penalties
    if entry.upgrade_authority == "single":
        score -= 15
    if not entry.team_known and not entry.vc_backed:
        score -= 10

    return max(0, min(100, score))


def trust_level_for_score(score: int) -> TrustLevel:
    if score >= 75:
        return TrustLevel.HIGH
    if score >= 50:
        return TrustLevel.MEDIUM
    return TrustLevel.LOW


class ProtocolRegistry:
    """Read-only lookup from protocol slug to curated trust data."""

    def __init__(self, entries: Iterable[ProtocolRisk] = DEFAULT_PROTOCOLS):
        self._entries: Mapping[str, ProtocolRisk] = MappingProxyType(
            {entry.slug: entry for entry in entries}
        )
        logger.debug(f"ProtocolRegistry initialized with {len(self._entries)} protocols")

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, protocol: str) -> bool:
        return self.get(protocol) is not None

    def get(self, protocol: str) -> ProtocolRisk | None:
        """Find a protocol, tolerating feed slugs like 'jito-liquid-staking'."""
        slug = normalize_slug(protocol)
        if not slug:
            return None
        if slug in self._entries:
            return self._entries[slug]
        return self._entries.get(slug.split("-")[0])

    def trust_level(self, protocol: str) -> TrustLevel | None:
        entry = self.get(protocol)
        return entry.overall_trust if entry else None

    def all(self, as_of: date | None = None) -> list[ProtocolTrust]:
        """Every registered protocol with its computed trust score."""
        results = []
        for entry in self._entries.values():
            score = trust_score(entry, as_of)
            results.append(
                ProtocolTrust(
                    protocol=entry,
                    trust_score=score,
                    trust_level=trust_level_for_score(score),
                )
            )
        return sorted(results, key=lambda t: t.trust_score, reverse=True)
