import logging
from datetime import date, datetime
from typing import List, Dict, Any, Optional, Iterable, Union
from enum import Enum

from sqlalchemy.orm import Session
from fastapi import HTTPException

from backend.app.models.models import Savings, SavingsContribution, ContributionSource, Frequency
from backend.app.schemas.savings import SavingsCreate, SavingsUpdate, ContributionCreate
from backend.app.services.period_service import convert_amount, daily_amount, is_one_time

logger = logging.getLogger(__name__)

# Spread used for suggestions when there is no usable goal date
DEFAULT_GOAL_DAYS = 365

# --- CRUD ---

def create_savings(db: Session, savings_data: SavingsCreate) -> Savings:
    """Create a new savings goal"""
    savings = Savings(**savings_data.model_dump())
    db.add(savings)
    db.commit()
    db.refresh(savings)

    logger.info("Created savings goal %s (%s)", savings.id, savings.name)
    return savings

def get_savings_goals(db: Session, budget_id: Optional[str] = None) -> List[Savings]:
    """Get all savings goals, optionally only those linked to a budget"""
    goals = db.query(Savings).order_by(Savings.created_at.desc()).all()
    if budget_id:
        goals = [goal for goal in goals if budget_id in (goal.linked_budget_ids or [])]
    return goals

def get_savings(db: Session, savings_id: str) -> Savings:
    """Get a specific savings goal by ID"""
    savings = db.query(Savings).filter(Savings.id == savings_id).first()
    if not savings:
        raise HTTPException(status_code=404, detail="Savings goal not found")
    return savings

def update_savings(db: Session, savings_id: str, savings_update: SavingsUpdate) -> Savings:
    """Update a savings goal, changing only the fields present in the request"""
    savings = get_savings(db, savings_id)

    update_data = savings_update.model_dump(exclude_unset=True)

    # Keep the contribution frequency present iff an amount is set
    amount = update_data.get("recurring_contribution_amount", savings.recurring_contribution_amount)
    frequency = update_data.get("recurring_contribution_frequency", savings.recurring_contribution_frequency)
    if amount is not None and frequency in (None, Frequency.NONE):
        raise HTTPException(status_code=400, detail="recurring_contribution_frequency is required with a recurring amount")
    if amount is None:
        update_data["recurring_contribution_frequency"] = None

    if update_data.get("linked_budget_ids") is not None:
        update_data["linked_budget_ids"] = list(dict.fromkeys(update_data["linked_budget_ids"]))

    for key, value in update_data.items():
        setattr(savings, key, value)
    savings.updated_at = datetime.utcnow()

    db.commit()
    db.refresh(savings)

    logger.info("Updated savings goal %s fields=%s", savings_id, sorted(update_data))
    return savings

def delete_savings(db: Session, savings_id: str) -> Dict[str, bool]:
    """Delete a savings goal together with its contributions"""
    savings = get_savings(db, savings_id)
    db.delete(savings)
    db.commit()

    logger.info("Deleted savings goal %s", savings_id)
    return {"success": True}

# --- Contributions ---

def add_contribution(db: Session, savings_id: str, contribution_data: ContributionCreate) -> SavingsContribution:
    """Record a contribution and add it to the goal's current amount"""
    savings = get_savings(db, savings_id)

    if contribution_data.source == ContributionSource.BUDGET_REMAINDER and not contribution_data.budget_id:
        raise HTTPException(status_code=400, detail="budget_id is required for a budget remainder contribution")

    contribution = SavingsContribution(savings_id=savings_id, **contribution_data.model_dump())
    savings.current_amount = (savings.current_amount or 0.0) + contribution_data.amount
    savings.updated_at = datetime.utcnow()

    db.add(contribution)
    db.commit()
    db.refresh(contribution)

    logger.info("Added contribution %.2f to savings goal %s", contribution.amount, savings_id)
    return contribution

def get_contributions(db: Session, savings_id: str) -> List[SavingsContribution]:
    """Get all contributions for a savings goal, newest first"""
    get_savings(db, savings_id)
    return db.query(SavingsContribution).filter(
        SavingsContribution.savings_id == savings_id
    ).order_by(SavingsContribution.date.desc()).all()

def delete_contribution(db: Session, contribution_id: str) -> Dict[str, bool]:
    """Delete a contribution and take it back out of the goal's current amount"""
    contribution = db.query(SavingsContribution).filter(SavingsContribution.id == contribution_id).first()
    if not contribution:
        raise HTTPException(status_code=404, detail="Contribution not found")

    savings = contribution.savings
    if savings.current_amount - contribution.amount < 0:
        raise HTTPException(
            status_code=400,
            detail=f"Removing this contribution would make the balance negative. Current: {savings.current_amount}, Contribution: {contribution.amount}"
        )

    savings.current_amount -= contribution.amount
    savings.updated_at = datetime.utcnow()
    db.delete(contribution)
    db.commit()

    logger.info("Deleted contribution %s from savings goal %s", contribution_id, savings.id)
    return {"success": True}

# --- Progress ---

def has_target(savings: Any) -> bool:
    return savings.target_amount is not None and savings.target_amount > 0

def savings_progress(savings: Any) -> float:
    """Percent of the target reached; 0 for goals without a target"""
    if not has_target(savings):
        return 0.0
    return (savings.current_amount / savings.target_amount) * 100

def remaining_amount(savings: Any) -> float:
    if not has_target(savings):
        return 0.0
    return max(0.0, savings.target_amount - savings.current_amount)

def is_goal_reached(savings: Any) -> bool:
    if not has_target(savings):
        return False
    return savings.current_amount >= savings.target_amount

def days_until_goal(savings: Any, today: Optional[date] = None) -> Optional[int]:
    if not savings.goal_date:
        return None
    today = today or date.today()
    return (savings.goal_date - today).days

def suggested_contribution(
    savings: Any,
    frequency: Union[str, Enum] = Frequency.MONTHLY,
    today: Optional[date] = None
) -> float:
    """
    Contribution per `frequency` needed to close the remaining gap by the goal
    date. Goals without a date, or whose date has passed, are spread over a
    year.
    """
    remaining = remaining_amount(savings)
    if remaining <= 0:
        return 0.0

    days = days_until_goal(savings, today)
    if not days or days <= 0:
        days = DEFAULT_GOAL_DAYS

    return convert_amount(remaining / days, Frequency.DAILY, frequency)

def projected_amount(savings: Any, today: Optional[date] = None) -> float:
    """Balance expected at the goal date if recurring contributions continue"""
    if not savings.recurring_contribution_amount or not savings.goal_date:
        return savings.current_amount

    days = days_until_goal(savings, today)
    if days <= 0:
        return savings.current_amount

    per_day = daily_amount(savings.recurring_contribution_amount, savings.recurring_contribution_frequency)
    return savings.current_amount + per_day * days

def has_recurring_contributions(savings: Any) -> bool:
    return bool(
        savings.recurring_contribution_amount
        and savings.recurring_contribution_amount > 0
        and savings.recurring_contribution_frequency
        and not is_one_time(savings.recurring_contribution_frequency)
    )

def savings_status_color(savings: Any, today: Optional[date] = None) -> str:
    """
    green when the goal is reached or progress keeps pace with the time elapsed
    since the goal was created, yellow within 80% of that pace, orange behind
    it, blue for goals without a deadline.
    """
    progress = savings_progress(savings)
    if progress >= 100:
        return "green"

    days_left = days_until_goal(savings, today)
    if not days_left:
        return "blue"

    today = today or date.today()
    started = savings.created_at.date() if savings.created_at else today
    total_days = (savings.goal_date - started).days
    if total_days <= 0:
        expected = 100.0
    else:
        expected = max(0.0, (today - started).days / total_days * 100)

    if progress >= expected:
        return "green"
    if progress >= expected * 0.8:
        return "yellow"
    return "orange"

def contribution_summary(contributions: Iterable[Any]) -> Dict[str, float]:
    """Total contributed per source"""
    summary = {source.value: 0.0 for source in ContributionSource}
    for contribution in contributions:
        source = contribution.source or ContributionSource.MANUAL
        key = source.value if isinstance(source, Enum) else source
        summary[key] = summary.get(key, 0.0) + contribution.amount
    return summary

def get_savings_progress(
    db: Session,
    savings_id: str,
    frequency: Frequency = Frequency.MONTHLY,
    today: Optional[date] = None
) -> Dict[str, Any]:
    """Progress, suggestion and projection figures for a savings goal"""
    savings = get_savings(db, savings_id)

    return {
        "savings_id": savings.id,
        "name": savings.name,
        "current_amount": savings.current_amount,
        "target_amount": savings.target_amount,
        "progress_percent": savings_progress(savings),
        "remaining_amount": remaining_amount(savings),
        "is_goal_reached": is_goal_reached(savings),
        "days_until_goal": days_until_goal(savings, today),
        "suggested_contribution": suggested_contribution(savings, frequency, today),
        "suggested_frequency": frequency,
        "projected_amount": projected_amount(savings, today),
        "has_recurring_contributions": has_recurring_contributions(savings),
        "status_color": savings_status_color(savings, today),
        "contribution_summary": contribution_summary(savings.contributions)
    }
