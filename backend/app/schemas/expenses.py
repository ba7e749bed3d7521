from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Dict
import datetime as dt
from datetime import datetime, date

from backend.app.models.models import ExpenseCategory, PaymentMethod, Frequency
from backend.app.schemas.common import reject_explicit_nulls

EXPENSE_REQUIRED_FIELDS = ("title", "amount", "category", "date", "is_recurring", "tags")

class ExpenseBase(BaseModel):
    title: str = Field(..., min_length=1)
    amount: float = Field(gt=0)
    category: ExpenseCategory = ExpenseCategory.OTHER
    date: date
    description: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None
    is_recurring: bool = False
    recurring_frequency: Optional[Frequency] = None
    tags: List[str] = []

class ExpenseCreate(ExpenseBase):

    @model_validator(mode="after")
    def check_recurring_frequency(self):
        # recurring_frequency is present iff is_recurring
        if self.is_recurring and self.recurring_frequency in (None, Frequency.NONE):
            raise ValueError("recurring_frequency is required for a recurring expense")
        if not self.is_recurring:
            self.recurring_frequency = None
        return self

class ExpenseUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    amount: Optional[float] = Field(None, gt=0)
    category: Optional[ExpenseCategory] = None
    date: Optional[dt.date] = None
    description: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None
    is_recurring: Optional[bool] = None
    recurring_frequency: Optional[Frequency] = None
    tags: Optional[List[str]] = None

    @model_validator(mode="after")
    def check_required_not_null(self):
        reject_explicit_nulls(self, EXPENSE_REQUIRED_FIELDS)
        return self

class ExpenseResponse(ExpenseBase):
    id: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class ExpenseFilter(BaseModel):
    category: Optional[ExpenseCategory] = None
    payment_method: Optional[PaymentMethod] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    min_amount: Optional[float] = None
    max_amount: Optional[float] = None
    is_recurring: Optional[bool] = None
    search: Optional[str] = None

class SavingsOpportunity(BaseModel):
    category: ExpenseCategory
    current_monthly_spend: float
    suggested_reduction: float
    potential_yearly_savings: float
    description: str

class ExpenseStats(BaseModel):
    total_expenses: float
    expense_count: int
    daily_average: float
    weekly_average: float
    monthly_average: float
    monthly_projection: float
    yearly_projection: float
    category_breakdown: Dict[str, float]
    payment_method_breakdown: Dict[str, float]
    top_category: Optional[str] = None
    savings_opportunities: List[SavingsOpportunity] = []
