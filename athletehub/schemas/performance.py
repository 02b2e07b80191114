from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

from athletehub.schemas.common import Payload, UTCDateTime

SessionType = Literal["training", "competition", "assessment", "recovery"]


class Metric(BaseModel):
    name: str
    value: Union[float, str]
    unit: Optional[str] = None


class PerformanceCreate(Payload):
    athlete_id: str
    sport: str
    date: Optional[UTCDateTime] = None
    type: SessionType
    metrics: List[Metric] = []
    notes: Optional[str] = None
    rating: Optional[float] = Field(None, ge=1, le=10)
    location: Optional[str] = None
    tags: List[str] = []


class PerformanceUpdate(Payload):
    sport: Optional[str] = None
    date: Optional[UTCDateTime] = None
    type: Optional[SessionType] = None
    metrics: Optional[List[Metric]] = None
    notes: Optional[str] = None
    rating: Optional[float] = Field(None, ge=1, le=10)
    location: Optional[str] = None
    tags: Optional[List[str]] = None


class AnnotationIn(Payload):
    timestamp: float = Field(ge=0)
    note: str


class SkillAssessmentIn(Payload):
    skill: str
    rating: float = Field(ge=1, le=10)
    feedback: Optional[str] = None
    improvement_areas: List[str] = []


class SkillAssessmentUpdate(Payload):
    skill: Optional[str] = None
    rating: Optional[float] = Field(None, ge=1, le=10)
    feedback: Optional[str] = None
    improvement_areas: Optional[List[str]] = None
