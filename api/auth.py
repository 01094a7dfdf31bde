"""
API key authentication for FuelPool API.

Write endpoints (banking, pooling, baseline selection) depend on
``get_api_key``; read endpoints are public.
"""
from fastapi import HTTPException, Security, status, Depends
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session
from datetime import datetime, timezone
from typing import List, Optional
import uuid
import bcrypt
import secrets
import logging

from api.database import get_db
from api.models import APIKey
from api.config import settings

logger = logging.getLogger(__name__)

# API Key security scheme
api_key_header = APIKeyHeader(
    name=settings.api_key_header,
    auto_error=False
)


def generate_api_key() -> str:
    """Generate a secure random API key (32 bytes, URL-safe)."""
    return secrets.token_urlsafe(32)


def hash_api_key(api_key: str) -> str:
    """Hash an API key using bcrypt."""
    return bcrypt.hashpw(
        api_key.encode('utf-8'),
        bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    ).decode('utf-8')


def verify_api_key(plain_key: str, hashed_key: str) -> bool:
    """Verify an API key against its hash."""
    try:
        return bcrypt.checkpw(
            plain_key.encode('utf-8'),
            hashed_key.encode('utf-8')
        )
    except ValueError as e:
        logger.error(f"API key verification error: {e}")
        return False


def _is_expired(expires_at: Optional[datetime]) -> bool:
    if expires_at is None:
        return False
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at < datetime.now(timezone.utc)


async def get_api_key(
    api_key: str = Security(api_key_header),
    db: Session = Depends(get_db)
) -> Optional[APIKey]:
    """
    Validate API key from request header.

    Returns:
        APIKey: Valid API key model, or None when auth is disabled

    Raises:
        HTTPException: If API key is invalid, expired or missing
    """
    if not settings.auth_enabled:
        return None

    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key is required",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    active_keys = db.query(APIKey).filter(APIKey.is_active.is_(True)).all()

    for key_obj in active_keys:
        if verify_api_key(api_key, key_obj.key_hash):
            if _is_expired(key_obj.expires_at):
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail="API key has expired",
                )

            key_obj.last_used_at = datetime.now(timezone.utc)
            db.commit()

            logger.info(f"API key authenticated: {key_obj.name}")
            return key_obj

    logger.warning("Invalid API key attempted")
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid API key",
    )


def create_api_key_in_db(
    db: Session,
    name: str,
    expires_at: Optional[datetime] = None,
    metadata: Optional[dict] = None
) -> tuple[str, APIKey]:
    """
    Create a new API key in the database.

    Returns:
        tuple: (plain_text_key, api_key_model). The plain key is only
        available here.
    """
    plain_key = generate_api_key()

    api_key_obj = APIKey(
        key_hash=hash_api_key(plain_key),
        name=name,
        expires_at=expires_at,
        extra_metadata=metadata or {},
    )

    db.add(api_key_obj)
    db.commit()
    db.refresh(api_key_obj)

    logger.info(f"Created API key: {name}")
    return plain_key, api_key_obj


def list_api_keys(db: Session) -> List[APIKey]:
    return db.query(APIKey).order_by(APIKey.created_at).all()


def revoke_api_key(db: Session, key_id: str) -> bool:
    """
    Revoke an API key.

    Returns:
        bool: True if key was revoked, False if unknown or malformed id
    """
    try:
        kid = uuid.UUID(key_id)
    except ValueError:
        return False

    api_key = db.query(APIKey).filter(APIKey.id == kid).first()
    if not api_key:
        return False

    api_key.is_active = False
    db.commit()

    logger.info(f"Revoked API key: {api_key.name}")
    return True
