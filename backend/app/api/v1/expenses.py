from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional, Dict
from datetime import date

from backend.app.config import Settings, get_settings
from backend.app.database import get_db_session
from backend.app.models.models import ExpenseCategory, PaymentMethod
from backend.app.schemas.expenses import (
    ExpenseCreate, ExpenseUpdate, ExpenseResponse, ExpenseFilter, ExpenseStats
)
from backend.app.services.expense_service import (
    create_expense, get_expenses, get_expense, update_expense, delete_expense, get_expense_stats
)

router = APIRouter()

def expense_filters(
    category: Optional[ExpenseCategory] = Query(None, description="Filter by category"),
    payment_method: Optional[PaymentMethod] = Query(None, description="Filter by payment method"),
    start_date: Optional[date] = Query(None, description="Expenses on or after this date"),
    end_date: Optional[date] = Query(None, description="Expenses on or before this date"),
    min_amount: Optional[float] = Query(None, ge=0, description="Minimum amount"),
    max_amount: Optional[float] = Query(None, ge=0, description="Maximum amount"),
    is_recurring: Optional[bool] = Query(None, description="Only recurring or only one-time expenses"),
    search: Optional[str] = Query(None, description="Search title and description")
) -> ExpenseFilter:
    return ExpenseFilter(
        category=category,
        payment_method=payment_method,
        start_date=start_date,
        end_date=end_date,
        min_amount=min_amount,
        max_amount=max_amount,
        is_recurring=is_recurring,
        search=search
    )

@router.post("/", response_model=ExpenseResponse)
async def create_new_expense(
    expense_data: ExpenseCreate,
    db: Session = Depends(get_db_session)
):
    """
    Record a new expense.

    - Recurring expenses must declare a recurring_frequency
    - One-time expenses count at full amount against any budget period
    """
    return create_expense(db, expense_data)

@router.get("/", response_model=List[ExpenseResponse])
async def list_expenses(
    filters: ExpenseFilter = Depends(expense_filters),
    db: Session = Depends(get_db_session)
):
    """
    Get expenses with optional filters, newest first.
    """
    return get_expenses(db, filters)

@router.get("/stats", response_model=ExpenseStats)
async def expense_stats(
    filters: ExpenseFilter = Depends(expense_filters),
    db: Session = Depends(get_db_session),
    settings: Settings = Depends(get_settings)
):
    """
    Totals, averages, recurring projections and breakdowns for the matching expenses.

    - Categories above 15% of spend are listed as savings opportunities
    """
    return get_expense_stats(db, filters, settings.currency_symbol)

@router.get("/{expense_id}", response_model=ExpenseResponse)
async def get_single_expense(
    expense_id: str,
    db: Session = Depends(get_db_session)
):
    """
    Get a specific expense by ID.
    """
    return get_expense(db, expense_id)

@router.put("/{expense_id}", response_model=ExpenseResponse)
async def update_existing_expense(
    expense_id: str,
    expense_update: ExpenseUpdate,
    db: Session = Depends(get_db_session)
):
    """
    Update an expense. Only the fields sent are changed.
    """
    return update_expense(db, expense_id, expense_update)

@router.delete("/{expense_id}", response_model=Dict[str, bool])
async def delete_existing_expense(
    expense_id: str,
    db: Session = Depends(get_db_session)
):
    """
    Delete an expense. Budgets linking it are left untouched.
    """
    return delete_expense(db, expense_id)
