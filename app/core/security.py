# app/core/security.py
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
import logging

import jwt
from passlib.context import CryptContext

from .config import settings

logger = logging.getLogger(__name__)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

PLACEHOLDER_SECRET = "change-me-in-prod"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        # Malformed or unknown hash in storage
        logger.warning("Stored password hash could not be verified")
        return False


def create_jwt_token(data: Dict[str, Any], expires_minutes: Optional[int] = None) -> str:
    """Create JWT access token with expiration"""
    if not settings.SECRET_KEY or settings.SECRET_KEY == PLACEHOLDER_SECRET:
        raise ValueError("SECRET_KEY not properly configured")

    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_jwt_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode and verify JWT token"""
    if not token or not settings.SECRET_KEY or settings.SECRET_KEY == PLACEHOLDER_SECRET:
        return None
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired access token")
        return None
    except jwt.InvalidTokenError:
        return None
