"""User management service."""
import logging
from typing import Dict, Any, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError

from cafepos.exceptions import NotFoundError, ValidationError
from cafepos.models import User, UserRole
from cafepos.utils.formatters import parse_amount

logger = logging.getLogger(__name__)

VALID_ROLES = {role.value for role in UserRole}


def list_users(session) -> List[User]:
    return session.query(User).order_by(User.id).all()


def get_by_username(session, username: str) -> Optional[User]:
    return session.query(User).filter_by(username=username).first()


def save_user(session, data: Dict[str, Any]) -> Tuple[User, bool]:
    """
    Create a user, or update it when ``data`` carries an ``id``.

    A password is required on create; on update it is only changed when
    a new one is supplied.

    Returns:
        (user, created)

    Raises:
        ValidationError: missing fields, bad role or salary, taken username
        NotFoundError: update of an unknown user
    """
    username = str(data.get('username') or '').strip()
    name = str(data.get('name') or '').strip()
    role = str(data.get('role') or '').strip().lower()
    password = data.get('password') or ''

    if not username:
        raise ValidationError('username is required')
    if not name:
        raise ValidationError('name is required')
    if role not in VALID_ROLES:
        raise ValidationError(f"role must be one of: {', '.join(sorted(VALID_ROLES))}")
    try:
        salary = parse_amount(data.get('salary') if data.get('salary') not in (None, '') else 0, 'salary')
    except ValueError as e:
        raise ValidationError(str(e))

    user_id = data.get('id')
    if user_id:
        user = session.query(User).filter_by(id=user_id).first()
        if not user:
            raise NotFoundError(f'User #{user_id} not found')
        created = False
    else:
        if not password:
            raise ValidationError('password is required')
        user = User()
        session.add(user)
        created = True

    clash = session.query(User.id).filter(User.username == username, User.id != (user.id or 0)).first()
    if clash:
        session.rollback()
        raise ValidationError(f'Username "{username}" is already taken')

    user.username = username
    user.name = name
    user.role = role
    user.salary = salary
    if password:
        user.set_password(str(password))

    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ValidationError(f'Username "{username}" is already taken')
    except Exception:
        session.rollback()
        raise

    return user, created


def delete_user(session, user_id: int) -> Optional[str]:
    """Hard delete. Returns the username, or None if it did not exist."""
    user = session.query(User).filter_by(id=user_id).first()
    if not user:
        return None
    username = user.username
    try:
        session.delete(user)
        session.commit()
    except Exception:
        session.rollback()
        raise
    return username


def create_user(session, username: str, password: str, name: str, role: str, salary=0) -> User:
    """Convenience wrapper used by seeding and the CLI."""
    user, _ = save_user(session, {
        'username': username,
        'password': password,
        'name': name,
        'role': role,
        'salary': salary,
    })
    return user
