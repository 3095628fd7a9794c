"""
Authentication service.

Credentials map to a user and a role; the proof of identity handed back to
clients is an HS256 bearer token carrying ``{id, username, name, role}``.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

import jwt

from cafepos.exceptions import ForbiddenError
from cafepos.models import User

logger = logging.getLogger(__name__)

CLAIM_KEYS = ('id', 'username', 'name', 'role')


def authenticate(session, username, password) -> Optional[User]:
    """Return the user for valid credentials, None otherwise."""
    if not username or not password:
        return None
    user = session.query(User).filter_by(username=str(username).strip()).first()
    if user is None or not user.check_password(str(password)):
        logger.warning(f"Failed login attempt for username {username!r}")
        return None
    return user


def issue_token(user: User, secret: str, ttl_hours: int = 24, algorithm: str = 'HS256') -> str:
    now = datetime.now(timezone.utc)
    payload = dict(user.claims)
    payload['iat'] = now
    payload['exp'] = now + timedelta(hours=ttl_hours)
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(token: str, secret: str, algorithm: str = 'HS256') -> Dict[str, Any]:
    """
    Verify a bearer token and return its identity claims.

    Raises:
        ForbiddenError: bad signature, malformed or expired token
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except jwt.ExpiredSignatureError:
        raise ForbiddenError('Token has expired')
    except jwt.InvalidTokenError:
        raise ForbiddenError('Invalid token')

    if payload.get('id') is None or not payload.get('role'):
        raise ForbiddenError('Invalid token')
    return {key: payload.get(key) for key in CLAIM_KEYS}


def login(session, username, password, secret: str, ttl_hours: int = 24,
          algorithm: str = 'HS256') -> Optional[Tuple[User, str]]:
    """Authenticate and issue a token in one step."""
    user = authenticate(session, username, password)
    if user is None:
        return None
    return user, issue_token(user, secret, ttl_hours, algorithm)
