from pydantic import BaseModel, EmailStr


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    full_name: str | None = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    id: str
    email: str
    full_name: str | None = None
    subscription_tier: str = "free"


class AuthResponse(BaseModel):
    token: str
    user: UserResponse


class SubscriptionResponse(BaseModel):
    tier: str
    subscription_end_at: str | None = None
