import pytest

from labtrack.services.subscription import (
    can_access_feature,
    get_required_tier,
    is_elite,
    is_paid,
    normalize_tier,
    upgrade_message,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, "free"),
        ("", "free"),
        ("FREE", "free"),
        ("paid", "pro"),
        (" Pro ", "pro"),
        ("elite", "elite"),
        ("platinum", "free"),
    ],
)
def test_normalize_tier(raw, expected):
    assert normalize_tier(raw) == expected


def test_access_matrix():
    assert not can_access_feature("free", "pro")
    assert can_access_feature("paid", "pro")
    assert not can_access_feature("pro", "elite")
    assert can_access_feature("elite", "pro")
    assert can_access_feature("elite", "elite")
    assert is_paid("elite") and not is_paid(None)
    assert is_elite("ELITE") and not is_elite("pro")


def test_required_tier_by_path():
    assert get_required_tier("/bloodwork-history") == "elite"
    assert get_required_tier("/bloodwork-history/") == "elite"
    assert get_required_tier("/side-effects") == "pro"
    assert get_required_tier("/dashboard") == "free"
    assert get_required_tier("/") == "free"


def test_upgrade_message():
    assert upgrade_message("elite").startswith("Elite subscription required")
    assert upgrade_message("pro").startswith("Pro subscription required")


def test_feature_gate_can_be_overridden_by_tier():
    from labtrack.config import settings
    from labtrack.models.user import User
    from labtrack.routers.deps import UpgradeRequiredError, require_feature

    assert settings.history_required_tier == "elite"

    pro_user = User(email="pro@example.com", password_hash="x", subscription_tier="pro")
    assert require_feature("/bloodwork-history", "pro")(current_user=pro_user) is pro_user
    with pytest.raises(UpgradeRequiredError):
        require_feature("/bloodwork-history")(current_user=pro_user)
    with pytest.raises(UpgradeRequiredError):
        require_feature("/unlisted", "elite")(current_user=pro_user)
