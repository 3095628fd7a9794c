"""User model - staff accounts with a role and a monthly salary."""
import enum

from sqlalchemy import Column, Integer, String, Numeric
from werkzeug.security import generate_password_hash, check_password_hash

from cafepos.database import Base
from cafepos.utils.formatters import to_float


class UserRole(str, enum.Enum):
    """Staff roles."""
    ADMIN = 'admin'
    CASHIER = 'cashier'


class User(Base):
    """Staff user. Salary is monthly and only feeds financial reports."""

    __tablename__ = 'users'
    __table_args__ = {'sqlite_autoincrement': True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(80), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(120), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.CASHIER.value)
    salary = Column(Numeric(10, 2), nullable=False, default=0)

    def set_password(self, password):
        """Set password hash."""
        self.password_hash = generate_password_hash(password, method='scrypt')

    def check_password(self, password):
        """Check password against hash."""
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    @property
    def claims(self):
        """Identity carried inside bearer tokens."""
        return {
            'id': self.id,
            'username': self.username,
            'name': self.name,
            'role': self.role,
        }

    def to_dict(self):
        data = self.claims
        data['salary'] = to_float(self.salary)
        return data

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"
