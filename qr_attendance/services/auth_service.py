"""Authentication service for operator accounts."""
import logging
from datetime import datetime
from typing import Optional, Tuple
from flask_jwt_extended import create_access_token
from sqlalchemy.exc import IntegrityError
from qr_attendance import db
from qr_attendance.exceptions import AuthError, ConflictError
from qr_attendance.models.user import User, UserRole

logger = logging.getLogger(__name__)

class AuthService:
    @staticmethod
    def login(username: str, password: str) -> Tuple[str, User]:
        """Authenticate operator and return an access token and the user."""
        user = User.query.filter_by(username=username.strip()).first()
        
        if not user or not user.check_password(password):
            logger.warning("Failed login for username %r", username)
            raise AuthError("Invalid credentials")
        
        if not user.is_active:
            raise AuthError("Account is deactivated")
        
        user.last_login = datetime.utcnow()
        user.save()
        
        # JWT subjects must be strings
        access_token = create_access_token(
            identity=str(user.id),
            additional_claims={'role': user.role.value}
        )
        logger.info("User %s logged in", user.username)
        
        return access_token, user
    
    @staticmethod
    def register(
        username: str,
        password: str,
        email: Optional[str] = None,
        role: Optional[str] = None
    ) -> User:
        """Create a new operator account."""
        username = username.strip()
        
        if User.query.filter_by(username=username).first():
            raise ConflictError("User already exists", field='username')
        
        user = User(
            username=username,
            email=email.lower().strip() if email else None,
            role=UserRole(role) if role else UserRole.USER
        )
        user.set_password(password)
        
        try:
            user.save()
        except IntegrityError:
            db.session.rollback()
            raise ConflictError("User already exists", field='username')
        
        logger.info("Created %s account %s", user.role.value, user.username)
        return user
    
    @staticmethod
    def get_user_by_id(user_id: int) -> Optional[User]:
        """Get user by ID."""
        return User.get_by_id(user_id)
    
    @staticmethod
    def list_users():
        return User.query.order_by(User.username.asc()).all()
