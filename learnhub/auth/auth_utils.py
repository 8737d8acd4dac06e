from datetime import timedelta
from fastapi import Header, HTTPException, Depends
from jose import jwt, JWTError

from learnhub.config import JWT_SECRET_KEY, JWT_ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES
from learnhub.auth.auth_models import User, UserRole
from learnhub.utils import utcnow


def create_access_token(user: User) -> str:
    expires_at = utcnow() + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role.value,
        "avatar": user.avatar,
        "verified": user.is_verified,
        "exp": expires_at,
    }
    return jwt.encode(payload, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def _decode_jwt_token(token: str) -> dict:
    try:
        return jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or Expired Token")


def get_current_user(authorization: str = Header(None)) -> User:
    """Resolve the verified user from a Bearer token"""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Unauthorized")

    payload = _decode_jwt_token(authorization.split(" ", 1)[1])
    if not payload.get("sub") or not payload.get("verified"):
        raise HTTPException(status_code=401, detail="Login not verified")

    try:
        return User(
            id=payload["sub"],
            name=payload.get("name", ""),
            email=payload.get("email", ""),
            role=UserRole(payload.get("role", UserRole.STUDENT.value)),
            avatar=payload.get("avatar", ""),
            is_verified=True
        )
    except ValueError:
        raise HTTPException(status_code=401, detail="Malformed token claims")


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Access denied. Admin privileges required.")
    return user
