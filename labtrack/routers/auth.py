from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from labtrack.database import get_db
from labtrack.models.user import User
from labtrack.routers.deps import get_bearer_token, get_current_user
from labtrack.schemas.user import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from labtrack.services.auth import authenticate, create_session, hash_password, revoke_session
from labtrack.services.subscription import normalize_tier

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        subscription_tier=normalize_tier(user.subscription_tier),
    )


@router.post("/register", response_model=AuthResponse)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    existing = db.query(User).filter(User.email == payload.email).first()
    if existing:
        raise HTTPException(status_code=400, detail="Email already registered")

    user = User(email=payload.email, password_hash=hash_password(payload.password), full_name=payload.full_name)
    db.add(user)
    db.commit()
    db.refresh(user)

    session = create_session(db, user.id)
    return AuthResponse(token=session.id, user=_user_response(user))


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate(db, payload.email, payload.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    session = create_session(db, user.id)
    return AuthResponse(token=session.id, user=_user_response(user))


@router.post("/logout")
def logout(token: str = Depends(get_bearer_token), db: Session = Depends(get_db)):
    revoke_session(db, token)
    return {"statusCode": 200, "message": "Logged out", "data": None}


@router.get("/user", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return _user_response(current_user)
