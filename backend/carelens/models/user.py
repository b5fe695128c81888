"""
User, profile and authentication models.
"""

from pydantic import EmailStr, Field
from typing import Optional, List
from datetime import date, datetime

from .base import CamelModel


class Exercise(CamelModel):
    """Habitual exercise descriptor."""
    type: str = ""
    frequency: str = ""
    duration: str = ""


class Lifestyle(CamelModel):
    """Lifestyle sub-record of the profile."""
    smoking: bool = False
    alcohol: bool = False
    diet: List[str] = Field(default_factory=list)
    exercise: Exercise = Field(default_factory=Exercise)


class EmergencyContact(CamelModel):
    """Person to contact in an emergency."""
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str


class ProfileUpdate(CamelModel):
    """
    Full profile replacement payload.

    Every profile field except identity and credential. Fields that have a
    stored default may be omitted and are then reset to that default.
    """
    full_name: str = Field(..., min_length=1, max_length=100)
    date_of_birth: date
    gender: str
    email: EmailStr
    phone: str
    address: str
    blood_type: Optional[str] = None
    medical_history: List[str] = Field(default_factory=list)
    family_history: List[str] = Field(default_factory=list)
    lifestyle: Lifestyle
    emergency_contacts: List[EmergencyContact] = Field(default_factory=list)
    organ_donor: bool = False
    data_sharing: bool = False


class Profile(CamelModel):
    """Stored profile fields. Empty until the first profile update."""
    full_name: str = ""
    date_of_birth: Optional[date] = None
    gender: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    blood_type: Optional[str] = None
    medical_history: List[str] = Field(default_factory=list)
    family_history: List[str] = Field(default_factory=list)
    lifestyle: Lifestyle = Field(default_factory=Lifestyle)
    emergency_contacts: List[EmergencyContact] = Field(default_factory=list)
    organ_donor: bool = False
    data_sharing: bool = False


PROFILE_FIELDS = tuple(Profile.model_fields)


class UserCreate(CamelModel):
    """Registration payload."""
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6, max_length=100)


class UserLogin(CamelModel):
    """User login model."""
    username: str
    password: str


class UserCredentials(CamelModel):
    """What the gateway needs to create a user."""
    username: str
    hashed_password: str


class User(Profile):
    """User response model (no password)."""
    id: str
    username: str
    created_at: datetime

    def profile(self) -> Profile:
        return Profile(**self.model_dump(include=set(PROFILE_FIELDS)))


class UserInDB(User):
    """User model as stored in database."""
    hashed_password: str

    def to_public(self) -> User:
        return User(**self.model_dump(exclude={"hashed_password"}))


class Token(CamelModel):
    """JWT token response."""
    access_token: str
    token_type: str = "bearer"
    user: User


class TokenData(CamelModel):
    """JWT token payload data."""
    user_id: Optional[str] = None
    username: Optional[str] = None
