import logging
import math
from datetime import datetime
from typing import List, Dict, Any, Optional, Iterable, Union
from enum import Enum

from sqlalchemy.orm import Session
from fastapi import HTTPException

from backend.app.models.models import Budget, Expense, Savings
from backend.app.schemas.budgets import BudgetCreate, BudgetUpdate
from backend.app.services.period_service import (
    expense_amount_for_period, contribution_amount_for_period
)
from backend.app.services.format_service import format_currency

logger = logging.getLogger(__name__)

# --- Period-adjusted budget math (pure, never raises) ---

def spent_for_budget(budget: Any, all_expenses: Iterable[Any]) -> float:
    """
    Period-adjusted total of the expenses linked to a budget.

    Only expenses whose id is in budget.linked_expense_ids count; each is
    converted to the budget's period. Ids with no matching expense are
    ignored.
    """
    linked_ids = set(budget.linked_expense_ids or [])
    if not linked_ids:
        return 0.0
    return sum(
        (expense_amount_for_period(expense, budget.period)
         for expense in all_expenses if expense.id in linked_ids),
        0.0
    )

def allocated_for_budget(
    budget_id: str,
    budget_period: Union[str, Enum],
    all_savings_goals: Iterable[Any]
) -> float:
    """
    Recurring savings contributions earmarked against a budget.

    Every savings goal linking budget_id with a recurring contribution adds
    its full contribution converted to budget_period. A goal linked to
    several budgets counts in full against each of them.
    """
    total = 0.0
    for savings in all_savings_goals:
        if budget_id not in (savings.linked_budget_ids or []):
            continue
        if not savings.recurring_contribution_amount:
            continue
        total += contribution_amount_for_period(savings, budget_period)
    return total

def suggest_budget(
    expenses: Iterable[Any],
    category: Optional[Union[str, Enum]],
    target_period: Union[str, Enum]
) -> float:
    """
    Raw budget suggestion: the period-adjusted sum of past expenses in a
    category (or all expenses when category is None).

    0 means there was no data to base a suggestion on.
    """
    if isinstance(category, Enum):
        category = category.value

    total = 0.0
    for expense in expenses:
        expense_category = expense.category.value if isinstance(expense.category, Enum) else expense.category
        if category and expense_category != category:
            continue
        total += expense_amount_for_period(expense, target_period)
    return total

def round_suggestion(amount: float) -> float:
    """Round a suggestion up to the next multiple of ten for display"""
    if amount <= 0:
        return 0.0
    return float(math.ceil(amount / 10) * 10)

def status_color(percent_used: float, alert_threshold: Optional[float]) -> str:
    if percent_used >= 100:
        return "red"
    if percent_used >= (alert_threshold or 80):
        return "orange"
    if percent_used >= 50:
        return "yellow"
    return "green"

def budget_status(budget: Any, all_expenses: Iterable[Any], all_savings_goals: Iterable[Any]) -> Dict[str, Any]:
    """Spent, allocated and available figures for one budget period"""
    spent = spent_for_budget(budget, all_expenses)
    allocated = allocated_for_budget(budget.id, budget.period, all_savings_goals)
    available = budget.amount - spent - allocated

    percent_used = ((spent + allocated) / budget.amount) * 100 if budget.amount > 0 else 0.0
    threshold = budget.alert_threshold

    return {
        "spent": spent,
        "allocated": allocated,
        "available": available,
        "percent_used": percent_used,
        "is_exceeded": available < 0,
        "alert_reached": bool(threshold) and percent_used >= threshold,
        "status_color": status_color(percent_used, threshold)
    }

# --- CRUD ---

def create_budget(db: Session, budget_data: BudgetCreate) -> Budget:
    """Create a new budget"""
    budget = Budget(**budget_data.model_dump())
    db.add(budget)
    db.commit()
    db.refresh(budget)

    logger.info("Created budget %s (%s %.2f)", budget.id, budget.period, budget.amount)
    return budget

def get_budgets(db: Session) -> List[Budget]:
    """Get all budgets"""
    return db.query(Budget).order_by(Budget.created_at.desc()).all()

def get_budget(db: Session, budget_id: str) -> Budget:
    """Get a specific budget by ID"""
    budget = db.query(Budget).filter(Budget.id == budget_id).first()
    if not budget:
        raise HTTPException(status_code=404, detail="Budget not found")
    return budget

def update_budget(db: Session, budget_id: str, budget_update: BudgetUpdate) -> Budget:
    """Update a budget, changing only the fields present in the request"""
    budget = get_budget(db, budget_id)

    update_data = budget_update.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        setattr(budget, key, value)
    budget.updated_at = datetime.utcnow()

    db.commit()
    db.refresh(budget)

    logger.info("Updated budget %s fields=%s", budget_id, sorted(update_data))
    return budget

def delete_budget(db: Session, budget_id: str) -> Dict[str, bool]:
    """Delete a budget. Savings goals linking it keep the id."""
    budget = get_budget(db, budget_id)
    db.delete(budget)
    db.commit()

    logger.info("Deleted budget %s", budget_id)
    return {"success": True}

def link_expense(db: Session, budget_id: str, expense_id: str) -> Budget:
    """Link an existing expense to a budget"""
    budget = get_budget(db, budget_id)

    expense = db.query(Expense).filter(Expense.id == expense_id).first()
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")

    linked_ids = list(budget.linked_expense_ids or [])
    if expense_id not in linked_ids:
        # Assign a new list so the JSON column is flagged as changed
        budget.linked_expense_ids = linked_ids + [expense_id]
        budget.updated_at = datetime.utcnow()
        db.commit()
        db.refresh(budget)

    return budget

def unlink_expense(db: Session, budget_id: str, expense_id: str) -> Budget:
    """Remove an expense id from a budget; unknown ids are ignored"""
    budget = get_budget(db, budget_id)

    linked_ids = list(budget.linked_expense_ids or [])
    if expense_id in linked_ids:
        budget.linked_expense_ids = [i for i in linked_ids if i != expense_id]
        budget.updated_at = datetime.utcnow()
        db.commit()
        db.refresh(budget)

    return budget

# --- Summaries ---

def _summarize(budget: Budget, expenses: List[Expense], savings_goals: List[Savings], currency_symbol: str) -> Dict[str, Any]:
    status = budget_status(budget, expenses, savings_goals)
    return {
        "budget_id": budget.id,
        "name": budget.name,
        "period": budget.period,
        "amount": budget.amount,
        "linked_expense_count": len(budget.linked_expense_ids or []),
        "formatted_available": format_currency(status["available"], currency_symbol),
        **status
    }

def get_budget_summary(db: Session, budget_id: str, currency_symbol: str = "$") -> Dict[str, Any]:
    """Period-adjusted spending, savings allocation and availability of a budget"""
    budget = get_budget(db, budget_id)

    linked_ids = budget.linked_expense_ids or []
    expenses = db.query(Expense).filter(Expense.id.in_(linked_ids)).all() if linked_ids else []
    savings_goals = db.query(Savings).all()

    return _summarize(budget, expenses, savings_goals, currency_symbol)

def get_all_budget_summaries(db: Session, currency_symbol: str = "$") -> List[Dict[str, Any]]:
    """Summaries for every budget, computed from one load of expenses and savings"""
    budgets = get_budgets(db)
    expenses = db.query(Expense).all()
    savings_goals = db.query(Savings).all()

    return [_summarize(budget, expenses, savings_goals, currency_symbol) for budget in budgets]

def get_budget_suggestion(db: Session, category: Optional[str], period: str) -> Dict[str, Any]:
    """Suggest a budget amount from the stored expense history"""
    expenses = db.query(Expense).all()
    suggested = suggest_budget(expenses, category, period)

    return {
        "category": category,
        "period": period,
        "suggested_amount": suggested,
        "rounded_amount": round_suggestion(suggested),
        "has_data": suggested > 0
    }
