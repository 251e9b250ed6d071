from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from labtrack.database import get_db
from labtrack.models.user import User
from labtrack.services.auth import get_user_from_token
from labtrack.services.subscription import can_access_feature, get_required_tier, normalize_tier, upgrade_message


class UpgradeRequiredError(HTTPException):
    def __init__(self, feature: str):
        super().__init__(status_code=403, detail=upgrade_message(feature))


def get_bearer_token(authorization: str | None = Header(default=None)) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header")
    return authorization.replace("Bearer ", "", 1)


def get_current_user(
    token: str = Depends(get_bearer_token),
    db: Session = Depends(get_db),
) -> User:
    user = get_user_from_token(db, token)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid or expired session")
    return user


def require_feature(path: str, tier: str | None = None):
    """Dependency that admits users whose tier unlocks the given feature path.

    ``tier`` overrides the gate listed in ``FEATURE_GATES`` for that path.
    """
    required = normalize_tier(tier) if tier else get_required_tier(path)

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if required != "free" and not can_access_feature(current_user.subscription_tier, required):
            raise UpgradeRequiredError(required)
        return current_user

    return dependency
