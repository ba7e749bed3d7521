from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Dict
from datetime import datetime, date

from backend.app.models.models import SavingsCategory, Frequency, ContributionSource
from backend.app.schemas.common import reject_explicit_nulls

SAVINGS_REQUIRED_FIELDS = ("name", "linked_budget_ids", "auto_contribute")

class SavingsBase(BaseModel):
    name: str = Field(..., min_length=1)
    target_amount: Optional[float] = Field(None, gt=0)
    current_amount: float = Field(0.0, ge=0)
    goal_date: Optional[date] = None
    description: Optional[str] = None
    category: Optional[SavingsCategory] = None
    linked_budget_ids: List[str] = []
    auto_contribute: bool = False
    recurring_contribution_amount: Optional[float] = Field(None, gt=0)
    recurring_contribution_frequency: Optional[Frequency] = None

class SavingsCreate(SavingsBase):

    @model_validator(mode="after")
    def check_contribution_frequency(self):
        # recurring_contribution_frequency is present iff an amount is set
        if self.recurring_contribution_amount is not None:
            if self.recurring_contribution_frequency in (None, Frequency.NONE):
                raise ValueError("recurring_contribution_frequency is required with a recurring amount")
        else:
            self.recurring_contribution_frequency = None
        self.linked_budget_ids = list(dict.fromkeys(self.linked_budget_ids))
        return self

class SavingsUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    target_amount: Optional[float] = Field(None, gt=0)
    goal_date: Optional[date] = None
    description: Optional[str] = None
    category: Optional[SavingsCategory] = None
    linked_budget_ids: Optional[List[str]] = None
    auto_contribute: Optional[bool] = None
    recurring_contribution_amount: Optional[float] = Field(None, gt=0)
    recurring_contribution_frequency: Optional[Frequency] = None

    @model_validator(mode="after")
    def check_required_not_null(self):
        reject_explicit_nulls(self, SAVINGS_REQUIRED_FIELDS)
        return self

class SavingsResponse(SavingsBase):
    id: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class ContributionCreate(BaseModel):
    amount: float = Field(gt=0)
    date: date
    description: Optional[str] = None
    source: ContributionSource = ContributionSource.MANUAL
    budget_id: Optional[str] = None

class ContributionResponse(BaseModel):
    id: str
    savings_id: str
    amount: float
    date: date
    description: Optional[str] = None
    source: ContributionSource
    budget_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

class SavingsProgress(BaseModel):
    savings_id: str
    name: str
    current_amount: float
    target_amount: Optional[float] = None
    progress_percent: float
    remaining_amount: float
    is_goal_reached: bool
    days_until_goal: Optional[int] = None
    suggested_contribution: float
    suggested_frequency: Frequency
    projected_amount: float
    has_recurring_contributions: bool
    status_color: str
    contribution_summary: Dict[str, float]
