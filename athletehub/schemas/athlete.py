from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field

from athletehub.schemas.common import Payload, UTCDateTime


class Measurement(BaseModel):
    value: float = Field(gt=0)
    unit: str = "cm"


class Address(BaseModel):
    street: Optional[str] = None
    city: str
    state: str
    postal_code: Optional[str] = None
    country: str = "India"


class EmergencyContact(BaseModel):
    name: str
    relationship: str
    phone: str
    email: Optional[EmailStr] = None


class AthleteCreate(Payload):
    display_name: Optional[str] = None
    date_of_birth: UTCDateTime
    gender: Literal["male", "female", "other"]
    sports: List[str] = Field(min_length=1)
    primary_sport: str
    height: Optional[Measurement] = None
    weight: Optional[Measurement] = None
    address: Optional[Address] = None
    bio: Optional[str] = Field(None, max_length=1000)
    current_team: Optional[str] = None
    emergency_contacts: List[EmergencyContact] = []
    social_media: Dict[str, str] = {}


class AthleteUpdate(Payload):
    display_name: Optional[str] = None
    date_of_birth: Optional[UTCDateTime] = None
    gender: Optional[Literal["male", "female", "other"]] = None
    sports: Optional[List[str]] = None
    primary_sport: Optional[str] = None
    height: Optional[Measurement] = None
    weight: Optional[Measurement] = None
    address: Optional[Address] = None
    bio: Optional[str] = Field(None, max_length=1000)
    current_team: Optional[str] = None
    emergency_contacts: Optional[List[EmergencyContact]] = None
    social_media: Optional[Dict[str, str]] = None


class AchievementIn(Payload):
    title: str
    description: Optional[str] = None
    date: Optional[UTCDateTime] = None
    level: Optional[Literal["local", "district", "state", "national", "international"]] = None
    position: Optional[str] = None


class AchievementUpdate(Payload):
    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[UTCDateTime] = None
    level: Optional[Literal["local", "district", "state", "national", "international"]] = None
    position: Optional[str] = None


class CoachIn(Payload):
    coach_id: Optional[str] = None
