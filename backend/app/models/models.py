from uuid import uuid4
from datetime import datetime
from enum import Enum

from sqlalchemy import (
    Column, String, DateTime, Float, Boolean, ForeignKey, Enum as PgEnum, JSON, Date, Text
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

# --- ENUMS ---

class Frequency(str, Enum):
    """Recurrence cadence of an expense or a savings contribution"""
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    NONE = "none"  # one-time expense

class BudgetPeriod(str, Enum):
    """Accounting cycle of a budget"""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

class ExpenseCategory(str, Enum):
    FOOD = "food"
    GAS = "gas"
    TRANSPORTATION = "transportation"
    HOBBIES = "hobbies"
    ENTERTAINMENT = "entertainment"
    BILLS = "bills"
    SUBSCRIPTIONS = "subscriptions"
    SHOPPING = "shopping"
    HEALTH = "health"
    EDUCATION = "education"
    OTHER = "other"

class PaymentMethod(str, Enum):
    CASH = "cash"
    CREDIT = "credit"
    DEBIT = "debit"
    DIGITAL = "digital"
    OTHER = "other"

class SavingsCategory(str, Enum):
    EMERGENCY = "emergency"
    VACATION = "vacation"
    CAR = "car"
    HOUSE = "house"
    EDUCATION = "education"
    GENERAL = "general"

class ContributionSource(str, Enum):
    MANUAL = "manual"
    BUDGET_REMAINDER = "budget_remainder"
    INCOME = "income"

# --- SQLALCHEMY MODELS ---

class Expense(Base):
    __tablename__ = "expenses"

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    title = Column(String, nullable=False)
    amount = Column(Float, nullable=False)
    category = Column(PgEnum(ExpenseCategory), default=ExpenseCategory.OTHER)
    date = Column(Date, nullable=False)
    description = Column(Text, nullable=True)
    payment_method = Column(PgEnum(PaymentMethod), nullable=True)
    is_recurring = Column(Boolean, default=False)
    recurring_frequency = Column(PgEnum(Frequency), nullable=True)
    tags = Column(JSON, default=list)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=True)

class Budget(Base):
    __tablename__ = "budgets"

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    name = Column(String, nullable=False)
    amount = Column(Float, nullable=False)
    category = Column(PgEnum(ExpenseCategory), nullable=True)  # None means all categories
    period = Column(PgEnum(BudgetPeriod), nullable=False, default=BudgetPeriod.MONTHLY)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    alert_threshold = Column(Float, default=80.0)
    description = Column(Text, nullable=True)
    # Plain id list, not a foreign key: deleting an expense leaves a dangling id
    linked_expense_ids = Column(JSON, default=list)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=True)

class Savings(Base):
    __tablename__ = "savings"

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    name = Column(String, nullable=False)
    target_amount = Column(Float, nullable=True)
    current_amount = Column(Float, default=0.0)
    goal_date = Column(Date, nullable=True)
    description = Column(Text, nullable=True)
    category = Column(PgEnum(SavingsCategory), nullable=True)
    linked_budget_ids = Column(JSON, default=list)
    auto_contribute = Column(Boolean, default=False)
    recurring_contribution_amount = Column(Float, nullable=True)
    recurring_contribution_frequency = Column(PgEnum(Frequency), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=True)

    # Relationships
    contributions = relationship(
        "SavingsContribution", back_populates="savings", cascade="all, delete-orphan"
    )

class SavingsContribution(Base):
    __tablename__ = "savings_contributions"

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    savings_id = Column(String, ForeignKey("savings.id"), nullable=False)
    amount = Column(Float, nullable=False)
    date = Column(Date, nullable=False)
    description = Column(String, nullable=True)
    source = Column(PgEnum(ContributionSource), default=ContributionSource.MANUAL)
    budget_id = Column(String, nullable=True)  # set when source is budget_remainder
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    savings = relationship("Savings", back_populates="contributions")
