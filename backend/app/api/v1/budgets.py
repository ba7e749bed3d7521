from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Dict, Optional

from backend.app.config import Settings, get_settings
from backend.app.database import get_db_session
from backend.app.models.models import BudgetPeriod, ExpenseCategory
from backend.app.schemas.budgets import (
    BudgetCreate, BudgetInDB, BudgetUpdate, BudgetSummary, BudgetSuggestion
)
from backend.app.services.budget_service import (
    create_budget, get_budgets, get_budget, update_budget, delete_budget,
    link_expense, unlink_expense, get_budget_summary, get_all_budget_summaries,
    get_budget_suggestion
)

router = APIRouter()

@router.post("/", response_model=BudgetInDB)
def create_budget_endpoint(
    budget_data: BudgetCreate,
    db: Session = Depends(get_db_session)
):
    """
    Create a new budget
    """
    return create_budget(db, budget_data)

@router.get("/", response_model=List[BudgetInDB])
def get_budgets_endpoint(
    db: Session = Depends(get_db_session)
):
    """
    Get all budgets
    """
    return get_budgets(db)

@router.get("/summary", response_model=List[BudgetSummary])
def get_budgets_summary_endpoint(
    db: Session = Depends(get_db_session),
    settings: Settings = Depends(get_settings)
):
    """
    Get period-adjusted spending, savings allocation and availability for all budgets
    """
    return get_all_budget_summaries(db, settings.currency_symbol)

@router.get("/suggest", response_model=BudgetSuggestion)
def suggest_budget_endpoint(
    category: Optional[ExpenseCategory] = Query(None, description="Category to base the suggestion on; all when omitted"),
    period: Optional[BudgetPeriod] = Query(None, description="Budget period; defaults to the configured period"),
    db: Session = Depends(get_db_session),
    settings: Settings = Depends(get_settings)
):
    """
    Suggest a budget amount from the recorded expense history.

    A suggested_amount of 0 means there is no matching history.
    """
    target_period = period.value if period else settings.default_budget_period
    return get_budget_suggestion(db, category.value if category else None, target_period)

@router.get("/{budget_id}", response_model=BudgetInDB)
def get_budget_endpoint(
    budget_id: str,
    db: Session = Depends(get_db_session)
):
    """
    Get a specific budget by ID
    """
    return get_budget(db, budget_id)

@router.get("/{budget_id}/summary", response_model=BudgetSummary)
def get_budget_summary_endpoint(
    budget_id: str,
    db: Session = Depends(get_db_session),
    settings: Settings = Depends(get_settings)
):
    """
    Get period-adjusted spending, savings allocation and availability for a budget
    """
    return get_budget_summary(db, budget_id, settings.currency_symbol)

@router.put("/{budget_id}", response_model=BudgetInDB)
def update_budget_endpoint(
    budget_id: str,
    budget_update: BudgetUpdate,
    db: Session = Depends(get_db_session)
):
    """
    Update an existing budget. Only the fields sent are changed.
    """
    return update_budget(db, budget_id, budget_update)

@router.delete("/{budget_id}", response_model=Dict[str, bool])
def delete_budget_endpoint(
    budget_id: str,
    db: Session = Depends(get_db_session)
):
    """
    Delete a budget
    """
    return delete_budget(db, budget_id)

@router.post("/{budget_id}/expenses/{expense_id}", response_model=BudgetInDB)
def link_expense_endpoint(
    budget_id: str,
    expense_id: str,
    db: Session = Depends(get_db_session)
):
    """
    Link an expense to a budget for spend tracking
    """
    return link_expense(db, budget_id, expense_id)

@router.delete("/{budget_id}/expenses/{expense_id}", response_model=BudgetInDB)
def unlink_expense_endpoint(
    budget_id: str,
    expense_id: str,
    db: Session = Depends(get_db_session)
):
    """
    Unlink an expense from a budget
    """
    return unlink_expense(db, budget_id, expense_id)
