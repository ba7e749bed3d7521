from typing import Optional, List
from datetime import date, datetime
from pydantic import BaseModel, Field, field_validator, model_validator

from backend.app.models.models import BudgetPeriod, ExpenseCategory
from backend.app.schemas.common import reject_explicit_nulls

BUDGET_REQUIRED_FIELDS = ("name", "amount", "period", "start_date", "alert_threshold", "linked_expense_ids")

class BudgetBase(BaseModel):
    name: str = Field(..., min_length=1)
    amount: float = Field(gt=0)
    category: Optional[ExpenseCategory] = None  # None tracks every category
    period: BudgetPeriod = BudgetPeriod.MONTHLY
    start_date: date
    end_date: Optional[date] = None
    alert_threshold: float = Field(80.0, ge=0)
    description: Optional[str] = None

class BudgetCreate(BudgetBase):
    linked_expense_ids: List[str] = []

    @field_validator('linked_expense_ids')
    def dedupe_linked_ids(cls, v):
        return list(dict.fromkeys(v))

class BudgetUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    amount: Optional[float] = Field(None, gt=0)
    category: Optional[ExpenseCategory] = None
    period: Optional[BudgetPeriod] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    alert_threshold: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None
    linked_expense_ids: Optional[List[str]] = None

    @field_validator('linked_expense_ids')
    def dedupe_linked_ids(cls, v):
        if v is None:
            return v
        return list(dict.fromkeys(v))

    @model_validator(mode="after")
    def check_required_not_null(self):
        reject_explicit_nulls(self, BUDGET_REQUIRED_FIELDS)
        return self

class BudgetInDB(BudgetBase):
    id: str
    linked_expense_ids: List[str] = []
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class BudgetSummary(BaseModel):
    budget_id: str
    name: str
    period: BudgetPeriod
    amount: float
    spent: float
    allocated: float
    available: float
    percent_used: float
    is_exceeded: bool
    alert_reached: bool
    status_color: str
    linked_expense_count: int
    formatted_available: str

class BudgetSuggestion(BaseModel):
    category: Optional[ExpenseCategory] = None
    period: BudgetPeriod
    suggested_amount: float
    rounded_amount: float
    has_data: bool
