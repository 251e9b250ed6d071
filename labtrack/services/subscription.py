"""Subscription tiers as stored on the user row.

``pro`` and the legacy ``paid`` spelling both mean the paid tier; ``elite``
is the highest tier. Anything else is treated as ``free``.
"""

from typing import Literal

Tier = Literal["free", "pro", "elite"]
Feature = Literal["pro", "elite"]

# Minimum tier per feature path. Paths not listed are free.
FEATURE_GATES: dict[str, Tier] = {
    "/stack-explorer": "pro",
    "/stack-education": "pro",
    "/side-effects": "pro",
    "/progress-photos": "pro",
    "/results-forecaster": "pro",
    "/counterfeit-checker": "pro",
    "/supplement-analyzer": "pro",
    "/bloodwork-parser": "elite",
    "/bloodwork-history": "elite",
    "/recovery-timeline": "elite",
    "/telehealth-referral": "elite",
}


def normalize_tier(tier: str | None) -> Tier:
    value = (tier or "free").strip().lower()
    if value == "elite":
        return "elite"
    if value in {"pro", "paid"}:
        return "pro"
    return "free"


def is_paid(tier: str | None) -> bool:
    return normalize_tier(tier) in {"pro", "elite"}


def is_elite(tier: str | None) -> bool:
    return normalize_tier(tier) == "elite"


def can_access_feature(tier: str | None, feature: Feature) -> bool:
    if feature == "elite":
        return is_elite(tier)
    if feature == "pro":
        return is_paid(tier)
    return False


def get_required_tier(path: str) -> Tier:
    normalized = path.rstrip("/") or "/"
    return FEATURE_GATES.get(normalized, "free")


def upgrade_message(feature: Feature) -> str:
    label = "Elite" if feature == "elite" else "Pro"
    return f"{label} subscription required. Upgrade to access this feature."
