from fastapi import APIRouter, Depends, Query

from labtrack.models.user import User
from labtrack.routers.deps import get_current_user
from labtrack.schemas.user import SubscriptionResponse
from labtrack.services.subscription import can_access_feature, get_required_tier, normalize_tier

router = APIRouter(prefix="/api/subscription", tags=["subscription"])


@router.get("", response_model=SubscriptionResponse)
def get_subscription(current_user: User = Depends(get_current_user)):
    end_at = current_user.subscription_end_at
    return SubscriptionResponse(
        tier=normalize_tier(current_user.subscription_tier),
        subscription_end_at=end_at.isoformat() if end_at else None,
    )


@router.get("/access")
def check_access(path: str = Query(..., min_length=1), current_user: User = Depends(get_current_user)):
    required = get_required_tier(path)
    allowed = required == "free" or can_access_feature(current_user.subscription_tier, required)
    return {
        "statusCode": 200,
        "message": "Success",
        "data": {"path": path, "requiredTier": required, "allowed": allowed},
    }
