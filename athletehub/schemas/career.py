from typing import List, Literal, Optional

from pydantic import Field

from athletehub.schemas.common import Payload, UTCDateTime

CareerStatus = Literal["amateur", "semi-professional", "professional", "elite", "retired", "injured"]
GoalStatus = Literal["not_started", "in_progress", "completed", "abandoned"]
Priority = Literal["low", "medium", "high"]
CompetitionLevel = Literal["district", "state", "national", "international", "olympic", "other"]
ProgramStatus = Literal["upcoming", "active", "completed", "cancelled"]
OpportunityType = Literal["scholarship", "sponsorship", "team_selection", "training_camp", "job", "other"]
ApplicationStatus = Literal["not_applied", "applied", "shortlisted", "accepted", "rejected", "expired"]


class CareerProfileIn(Payload):
    current_status: Optional[CareerStatus] = None
    summary: Optional[str] = None
    agent: Optional[str] = None
    transition_plan: Optional[str] = None


class GoalIn(Payload):
    title: str
    description: Optional[str] = None
    category: Optional[Literal["performance", "skill", "competition", "education", "financial", "personal"]] = None
    target_date: Optional[UTCDateTime] = None
    priority: Priority = "medium"
    status: GoalStatus = "not_started"
    progress: int = Field(0, ge=0, le=100)


class GoalUpdate(Payload):
    title: Optional[str] = None
    description: Optional[str] = None
    target_date: Optional[UTCDateTime] = None
    priority: Optional[Priority] = None
    status: Optional[GoalStatus] = None
    progress: Optional[int] = Field(None, ge=0, le=100)


class SkillIn(Payload):
    skill: str
    category: str = "general"
    rating: float = Field(ge=1, le=10)
    target_rating: Optional[float] = Field(None, ge=1, le=10)
    notes: Optional[str] = None


class SkillUpdate(Payload):
    skill: Optional[str] = None
    category: Optional[str] = None
    rating: Optional[float] = Field(None, ge=1, le=10)
    target_rating: Optional[float] = Field(None, ge=1, le=10)
    notes: Optional[str] = None


class CompetitionIn(Payload):
    name: str
    level: CompetitionLevel = "other"
    location: Optional[str] = None
    date: UTCDateTime
    result: Optional[str] = None
    registration_status: Literal["not_registered", "registered", "confirmed", "cancelled"] = "not_registered"


class CompetitionUpdate(Payload):
    name: Optional[str] = None
    level: Optional[CompetitionLevel] = None
    location: Optional[str] = None
    date: Optional[UTCDateTime] = None
    result: Optional[str] = None
    registration_status: Optional[Literal["not_registered", "registered", "confirmed", "cancelled"]] = None


class TrainingProgramIn(Payload):
    title: str
    description: Optional[str] = None
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None
    frequency: Optional[str] = None
    focus: List[str] = []
    status: ProgramStatus = "upcoming"


class TrainingProgramUpdate(Payload):
    title: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None
    frequency: Optional[str] = None
    focus: Optional[List[str]] = None
    status: Optional[ProgramStatus] = None


class MentorIn(Payload):
    name: str
    user_id: Optional[str] = None
    expertise: List[str] = []
    meeting_frequency: Optional[str] = None
    status: Literal["active", "inactive"] = "active"
    notes: Optional[str] = None


class MentorUpdate(Payload):
    name: Optional[str] = None
    expertise: Optional[List[str]] = None
    meeting_frequency: Optional[str] = None
    status: Optional[Literal["active", "inactive"]] = None
    notes: Optional[str] = None


class OpportunityIn(Payload):
    type: OpportunityType
    title: str
    organization: Optional[str] = None
    description: Optional[str] = None
    application_deadline: Optional[UTCDateTime] = None
    application_status: ApplicationStatus = "not_applied"


class OpportunityUpdate(Payload):
    type: Optional[OpportunityType] = None
    title: Optional[str] = None
    organization: Optional[str] = None
    description: Optional[str] = None
    application_deadline: Optional[UTCDateTime] = None
    application_status: Optional[ApplicationStatus] = None
