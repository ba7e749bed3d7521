import logging
from datetime import date, datetime
from typing import List, Optional, Dict, Any, Iterable

from sqlalchemy import or_
from sqlalchemy.orm import Session
from fastapi import HTTPException

from backend.app.models.models import Expense, Frequency, BudgetPeriod, PaymentMethod
from backend.app.schemas.expenses import ExpenseCreate, ExpenseUpdate, ExpenseFilter
from backend.app.services.period_service import convert_amount, is_one_time
from backend.app.services.format_service import format_currency

logger = logging.getLogger(__name__)

def create_expense(db: Session, expense_data: ExpenseCreate) -> Expense:
    """Create a new expense record"""
    expense = Expense(**expense_data.model_dump())
    db.add(expense)
    db.commit()
    db.refresh(expense)

    logger.info("Created expense %s (%s %.2f)", expense.id, expense.category, expense.amount)
    return expense

def get_expense(db: Session, expense_id: str) -> Expense:
    """Get a specific expense by ID"""
    expense = db.query(Expense).filter(Expense.id == expense_id).first()
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")
    return expense

def get_expenses(db: Session, filters: Optional[ExpenseFilter] = None) -> List[Expense]:
    """Get expenses with optional filtering, newest first"""
    query = db.query(Expense)

    if filters:
        if filters.category:
            query = query.filter(Expense.category == filters.category)
        if filters.payment_method:
            query = query.filter(Expense.payment_method == filters.payment_method)
        if filters.start_date:
            query = query.filter(Expense.date >= filters.start_date)
        if filters.end_date:
            query = query.filter(Expense.date <= filters.end_date)
        if filters.min_amount is not None:
            query = query.filter(Expense.amount >= filters.min_amount)
        if filters.max_amount is not None:
            query = query.filter(Expense.amount <= filters.max_amount)
        if filters.is_recurring is not None:
            query = query.filter(Expense.is_recurring == filters.is_recurring)
        if filters.search:
            pattern = f"%{filters.search}%"
            query = query.filter(or_(
                Expense.title.ilike(pattern),
                Expense.description.ilike(pattern)
            ))

    return query.order_by(Expense.date.desc(), Expense.created_at.desc()).all()

def update_expense(db: Session, expense_id: str, expense_update: ExpenseUpdate) -> Expense:
    """Update an expense, changing only the fields present in the request"""
    expense = get_expense(db, expense_id)

    update_data = expense_update.model_dump(exclude_unset=True)

    # Keep recurring_frequency present iff is_recurring
    is_recurring = update_data.get("is_recurring", expense.is_recurring)
    frequency = update_data.get("recurring_frequency", expense.recurring_frequency)
    if is_recurring and frequency in (None, Frequency.NONE):
        raise HTTPException(status_code=400, detail="recurring_frequency is required for a recurring expense")
    if not is_recurring:
        update_data["recurring_frequency"] = None

    for key, value in update_data.items():
        setattr(expense, key, value)

    expense.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(expense)

    logger.info("Updated expense %s fields=%s", expense_id, sorted(update_data))
    return expense

def delete_expense(db: Session, expense_id: str) -> Dict[str, bool]:
    """
    Delete an expense.

    Budgets that link this expense keep the id; a dangling id simply never
    matches when spending is aggregated.
    """
    expense = get_expense(db, expense_id)
    db.delete(expense)
    db.commit()

    logger.info("Deleted expense %s", expense_id)
    return {"success": True}

# --- Statistics ---

# Categories above this share of total spend are flagged as savings opportunities
OPPORTUNITY_SHARE_PERCENT = 15.0
SUGGESTED_REDUCTION = 0.10

def _recurring_total(expenses: Iterable[Any], period: str) -> float:
    total = 0.0
    for expense in expenses:
        if not expense.is_recurring or is_one_time(expense.recurring_frequency):
            continue
        total += convert_amount(expense.amount, expense.recurring_frequency, period)
    return total

def monthly_projection(expenses: Iterable[Any]) -> float:
    """Expected monthly cost of the recurring expenses; one-time expenses don't project"""
    return _recurring_total(expenses, BudgetPeriod.MONTHLY.value)

def yearly_projection(expenses: Iterable[Any]) -> float:
    """Expected yearly cost of the recurring expenses; one-time expenses don't project"""
    return _recurring_total(expenses, BudgetPeriod.YEARLY.value)

def daily_average(expenses: List[Any], today: Optional[date] = None) -> float:
    """
    Average spend per day, from the earliest expense's date through today
    inclusive. Every expense counts at its recorded amount.
    """
    if not expenses:
        return 0.0
    today = today or date.today()
    first = min(expense.date for expense in expenses)
    days = max((today - first).days + 1, 1)
    return sum(expense.amount for expense in expenses) / days

def category_breakdown(expenses: Iterable[Any]) -> Dict[str, float]:
    breakdown: Dict[str, float] = {}
    for expense in expenses:
        key = expense.category.value if hasattr(expense.category, "value") else str(expense.category)
        breakdown[key] = breakdown.get(key, 0.0) + expense.amount
    return breakdown

def payment_method_breakdown(expenses: Iterable[Any]) -> Dict[str, float]:
    """Totals per payment method; expenses without one count as other"""
    breakdown: Dict[str, float] = {}
    for expense in expenses:
        method = expense.payment_method or PaymentMethod.OTHER
        key = method.value if hasattr(method, "value") else str(method)
        breakdown[key] = breakdown.get(key, 0.0) + expense.amount
    return breakdown

def savings_opportunities(
    breakdown: Dict[str, float],
    monthly_average: float,
    currency_symbol: str = "$"
) -> List[Dict[str, Any]]:
    """
    Categories taking more than OPPORTUNITY_SHARE_PERCENT of total spend, with
    the saving a 10% cut would bring. Largest saving first.
    """
    total = sum(breakdown.values())
    if total <= 0:
        return []

    opportunities = []
    for category, amount in breakdown.items():
        share = amount / total
        if share * 100 <= OPPORTUNITY_SHARE_PERCENT:
            continue
        category_monthly = monthly_average * share
        reduction = category_monthly * SUGGESTED_REDUCTION
        yearly_savings = reduction * 12
        opportunities.append({
            "category": category,
            "current_monthly_spend": category_monthly,
            "suggested_reduction": reduction,
            "potential_yearly_savings": yearly_savings,
            "description": (
                f"Reducing {category} spending by 10% could save you "
                f"{format_currency(yearly_savings, currency_symbol)} per year."
            )
        })

    return sorted(opportunities, key=lambda o: o["potential_yearly_savings"], reverse=True)

def get_expense_stats(
    db: Session,
    filters: Optional[ExpenseFilter] = None,
    currency_symbol: str = "$",
    today: Optional[date] = None
) -> Dict[str, Any]:
    """Totals, averages, projections and breakdowns for the matching expenses"""
    expenses = get_expenses(db, filters)
    breakdown = category_breakdown(expenses)

    per_day = daily_average(expenses, today)
    monthly_average = convert_amount(per_day, Frequency.DAILY, Frequency.MONTHLY)

    return {
        "total_expenses": sum(expense.amount for expense in expenses),
        "expense_count": len(expenses),
        "daily_average": per_day,
        "weekly_average": convert_amount(per_day, Frequency.DAILY, Frequency.WEEKLY),
        "monthly_average": monthly_average,
        "monthly_projection": monthly_projection(expenses),
        "yearly_projection": yearly_projection(expenses),
        "category_breakdown": breakdown,
        "payment_method_breakdown": payment_method_breakdown(expenses),
        "top_category": max(breakdown, key=breakdown.get) if breakdown else None,
        "savings_opportunities": savings_opportunities(breakdown, monthly_average, currency_symbol)
    }
