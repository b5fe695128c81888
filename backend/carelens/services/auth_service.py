"""
Authentication service with JWT token management.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext

from ..config import get_settings
from ..database import Storage
from ..models.user import UserCreate, UserCredentials, User, Token, TokenData

settings = get_settings()
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class AuthService:
    """Authentication and user registration service."""
    
    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Verify password against hash."""
        return pwd_context.verify(plain_password, hashed_password)
    
    @staticmethod
    def get_password_hash(password: str) -> str:
        """Hash a password."""
        return pwd_context.hash(password)
    
    @staticmethod
    def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
        """Create JWT access token."""
        to_encode = data.copy()
        expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    
    @staticmethod
    def decode_token(token: str) -> Optional[TokenData]:
        """Decode and validate JWT token."""
        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
            user_id: str = payload.get("sub")
            username: str = payload.get("username")
            if user_id is None:
                return None
            return TokenData(user_id=user_id, username=username)
        except JWTError:
            return None
    
    @classmethod
    async def register(cls, storage: Storage, user_data: UserCreate) -> User:
        """Create a new user with an empty profile."""
        credentials = UserCredentials(
            username=user_data.username,
            hashed_password=cls.get_password_hash(user_data.password)
        )
        user = await storage.create_user(credentials)
        return user.to_public()
    
    @classmethod
    async def authenticate_user(cls, storage: Storage, username: str, password: str) -> Optional[User]:
        """Authenticate user with username and password."""
        user = await storage.get_user_by_username(username)
        if not user:
            return None
        if not cls.verify_password(password, user.hashed_password):
            return None
        return user.to_public()
    
    @classmethod
    async def login(cls, storage: Storage, username: str, password: str) -> Optional[Token]:
        """Login user and return access token."""
        user = await cls.authenticate_user(storage, username, password)
        if not user:
            return None
        
        access_token = cls.create_access_token(
            data={
                "sub": user.id,
                "username": user.username
            }
        )
        
        return Token(access_token=access_token, user=user)
    
    @classmethod
    async def get_current_user(cls, storage: Storage, token: str) -> Optional[User]:
        """Get current user from token."""
        token_data = cls.decode_token(token)
        if not token_data:
            return None
        
        user = await storage.get_user(token_data.user_id)
        if not user:
            return None
        
        return user.to_public()
