"""Operator account model for authentication and authorization."""
from enum import Enum
from werkzeug.security import generate_password_hash, check_password_hash
from qr_attendance import db
from qr_attendance.models.base import BaseModel, TimestampMixin

class UserRole(Enum):
    """Operator roles enumeration."""
    ADMIN = 'admin'
    USER = 'user'

class User(TimestampMixin, BaseModel):
    """Operator account used to sign in to the console and scanner."""
    
    __tablename__ = 'users'
    
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), nullable=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.Enum(UserRole), nullable=False, default=UserRole.USER)
    
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    last_login = db.Column(db.DateTime, nullable=True)
    
    def set_password(self, password: str) -> None:
        """Set user password with hashing."""
        self.password_hash = generate_password_hash(password)
    
    def check_password(self, password: str) -> bool:
        """Check if provided password matches user's password."""
        return check_password_hash(self.password_hash, password)
    
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
    
    def to_dict(self) -> dict:
        """Account fields without the password hash."""
        result = self.columns_dict(exclude=('password_hash',))
        result['role'] = self.role.value if self.role else None
        
        return result
    
    def __repr__(self) -> str:
        return f'<User {self.username}>'
