from typing import List, Literal, Optional

from pydantic import Field

from athletehub.schemas.common import Payload, UTCDateTime

IncomeCategory = Literal["salary", "prize", "sponsorship", "endorsement", "grant", "scholarship", "appearance", "other"]
ExpenseCategory = Literal[
    "training", "equipment", "travel", "accommodation", "nutrition",
    "medical", "coaching", "competition", "education", "other",
]
InvestmentType = Literal["stocks", "mutual_funds", "fixed_deposit", "real_estate", "ppf", "nps", "other"]
SponsorshipStatus = Literal["pending", "active", "expired", "terminated"]
GoalType = Literal["savings", "income", "investment", "other"]
GoalStatus = Literal["not_started", "in_progress", "achieved", "abandoned"]


class FinancialProfileIn(Payload):
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    notes: Optional[str] = None


class IncomeIn(Payload):
    category: IncomeCategory
    amount: float = Field(gt=0)
    date: UTCDateTime
    description: Optional[str] = None
    recurring: bool = False
    taxable: bool = True
    payment_status: Literal["pending", "partial", "completed"] = "completed"


class IncomeUpdate(Payload):
    category: Optional[IncomeCategory] = None
    amount: Optional[float] = Field(None, gt=0)
    date: Optional[UTCDateTime] = None
    description: Optional[str] = None
    recurring: Optional[bool] = None
    taxable: Optional[bool] = None
    payment_status: Optional[Literal["pending", "partial", "completed"]] = None


class ExpenseIn(Payload):
    category: ExpenseCategory
    amount: float = Field(gt=0)
    date: UTCDateTime
    description: Optional[str] = None
    recurring: bool = False
    tax_deductible: bool = False
    payment_method: Optional[Literal["cash", "credit_card", "debit_card", "bank_transfer", "upi", "other"]] = None


class ExpenseUpdate(Payload):
    category: Optional[ExpenseCategory] = None
    amount: Optional[float] = Field(None, gt=0)
    date: Optional[UTCDateTime] = None
    description: Optional[str] = None
    recurring: Optional[bool] = None
    tax_deductible: Optional[bool] = None


class SponsorshipIn(Payload):
    sponsor: str
    value: float = Field(ge=0)
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None
    status: SponsorshipStatus = "active"
    obligations: List[str] = []
    notes: Optional[str] = None


class SponsorshipUpdate(Payload):
    sponsor: Optional[str] = None
    value: Optional[float] = Field(None, ge=0)
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None
    status: Optional[SponsorshipStatus] = None
    obligations: Optional[List[str]] = None
    notes: Optional[str] = None


class InvestmentIn(Payload):
    type: InvestmentType
    institution: Optional[str] = None
    amount: float = Field(gt=0)
    current_value: Optional[float] = Field(None, ge=0)
    date: Optional[UTCDateTime] = None
    interest_rate: Optional[float] = None
    notes: Optional[str] = None


class InvestmentUpdate(Payload):
    type: Optional[InvestmentType] = None
    institution: Optional[str] = None
    amount: Optional[float] = Field(None, gt=0)
    current_value: Optional[float] = Field(None, ge=0)
    date: Optional[UTCDateTime] = None
    interest_rate: Optional[float] = None
    notes: Optional[str] = None


class FinancialGoalIn(Payload):
    name: str
    type: GoalType = "savings"
    target_amount: float = Field(gt=0)
    target_date: Optional[UTCDateTime] = None
    priority: Literal["low", "medium", "high"] = "medium"
    status: GoalStatus = "not_started"


class FinancialGoalUpdate(Payload):
    name: Optional[str] = None
    type: Optional[GoalType] = None
    target_amount: Optional[float] = Field(None, gt=0)
    target_date: Optional[UTCDateTime] = None
    priority: Optional[Literal["low", "medium", "high"]] = None
    status: Optional[GoalStatus] = None
