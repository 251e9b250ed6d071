import secrets
from datetime import datetime, timedelta

from passlib.context import CryptContext
from sqlalchemy.orm import Session

from labtrack.config import settings
from labtrack.models.user import User, UserSession

# pbkdf2_sha256 avoids native bcrypt backend incompatibilities across environments.
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def authenticate(db: Session, email: str, password: str) -> User | None:
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(password, user.password_hash):
        return None
    return user


def create_session(db: Session, user_id: str) -> UserSession:
    now = datetime.utcnow()
    session = UserSession(
        id=secrets.token_urlsafe(32),
        user_id=user_id,
        created_at=now,
        expires_at=now + timedelta(hours=settings.session_ttl_hours),
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


def get_user_from_token(db: Session, token: str) -> User | None:
    session = db.query(UserSession).filter(UserSession.id == token).first()
    if not session:
        return None
    if session.expires_at < datetime.utcnow():
        db.delete(session)
        db.commit()
        return None
    return db.get(User, session.user_id)


def revoke_session(db: Session, token: str) -> bool:
    session = db.get(UserSession, token)
    if not session:
        return False
    db.delete(session)
    db.commit()
    return True
