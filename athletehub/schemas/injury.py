from typing import List, Literal, Optional

from pydantic import Field

from athletehub.schemas.common import Payload, UTCDateTime

Severity = Literal["minor", "moderate", "severe", "critical"]
InjuryStatus = Literal["active", "recovering", "resolved"]
PhaseStatus = Literal["planned", "in-progress", "completed"]


class InjuryCreate(Payload):
    athlete_id: str
    type: str
    body_part: str
    severity: Severity
    date_of_injury: UTCDateTime
    diagnosis: Optional[str] = None
    symptoms: List[str] = []
    treatment: Optional[str] = None
    status: InjuryStatus = "active"
    notes: Optional[str] = None


class InjuryUpdate(Payload):
    type: Optional[str] = None
    body_part: Optional[str] = None
    severity: Optional[Severity] = None
    date_of_injury: Optional[UTCDateTime] = None
    diagnosis: Optional[str] = None
    symptoms: Optional[List[str]] = None
    treatment: Optional[str] = None
    status: Optional[InjuryStatus] = None
    notes: Optional[str] = None


class RehabPhaseIn(Payload):
    name: str
    description: Optional[str] = None
    status: PhaseStatus = "planned"
    estimated_duration: Optional[int] = Field(None, ge=0, description="days")
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None
    exercises: List[str] = []
    goals: List[str] = []


class RehabPhaseUpdate(Payload):
    name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[PhaseStatus] = None
    estimated_duration: Optional[int] = Field(None, ge=0)
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None
    exercises: Optional[List[str]] = None
    goals: Optional[List[str]] = None


class ProgressNoteIn(Payload):
    note: str
    pain_level: Optional[int] = Field(None, ge=0, le=10)
    functional_improvement: Optional[int] = Field(None, ge=0, le=100)


class ReturnToPlayIn(Payload):
    is_cleared: bool
    conditions: List[str] = []
    notes: Optional[str] = None
    follow_up_required: bool = False
    follow_up_date: Optional[UTCDateTime] = None
