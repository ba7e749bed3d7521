from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Dict, Optional

from backend.app.database import get_db_session
from backend.app.models.models import Frequency
from backend.app.schemas.savings import (
    SavingsCreate, SavingsUpdate, SavingsResponse,
    ContributionCreate, ContributionResponse, SavingsProgress
)
from backend.app.services.savings_service import (
    create_savings, get_savings_goals, get_savings, update_savings, delete_savings,
    add_contribution, get_contributions, delete_contribution, get_savings_progress
)

router = APIRouter()

@router.post("/", response_model=SavingsResponse)
async def create_savings_goal(
    savings_data: SavingsCreate,
    db: Session = Depends(get_db_session)
):
    """
    Create a new savings goal.

    - Target amount is optional; goals can track savings without one
    - A recurring contribution is earmarked against every linked budget
    """
    return create_savings(db, savings_data)

@router.get("/", response_model=List[SavingsResponse])
async def list_savings_goals(
    budget_id: Optional[str] = Query(None, description="Only goals linked to this budget"),
    db: Session = Depends(get_db_session)
):
    """
    Get all savings goals.
    """
    return get_savings_goals(db, budget_id)

@router.delete("/contributions/{contribution_id}", response_model=Dict[str, bool])
async def remove_contribution(
    contribution_id: str,
    db: Session = Depends(get_db_session)
):
    """
    Delete a contribution and subtract it from its goal's current amount.
    """
    return delete_contribution(db, contribution_id)

@router.get("/{savings_id}", response_model=SavingsResponse)
async def get_savings_goal(
    savings_id: str,
    db: Session = Depends(get_db_session)
):
    """
    Get a specific savings goal by ID.
    """
    return get_savings(db, savings_id)

@router.put("/{savings_id}", response_model=SavingsResponse)
async def update_savings_goal(
    savings_id: str,
    savings_update: SavingsUpdate,
    db: Session = Depends(get_db_session)
):
    """
    Update a savings goal. Only the fields sent are changed.
    """
    return update_savings(db, savings_id, savings_update)

@router.delete("/{savings_id}", response_model=Dict[str, bool])
async def delete_savings_goal(
    savings_id: str,
    db: Session = Depends(get_db_session)
):
    """
    Delete a savings goal and its contributions.
    """
    return delete_savings(db, savings_id)

@router.post("/{savings_id}/contributions", response_model=ContributionResponse)
async def create_contribution(
    savings_id: str,
    contribution_data: ContributionCreate,
    db: Session = Depends(get_db_session)
):
    """
    Add a contribution to a savings goal.

    - Increases the goal's current amount
    - Budget remainder contributions must name the budget
    """
    return add_contribution(db, savings_id, contribution_data)

@router.get("/{savings_id}/contributions", response_model=List[ContributionResponse])
async def list_contributions(
    savings_id: str,
    db: Session = Depends(get_db_session)
):
    """
    Get the contributions made to a savings goal, newest first.
    """
    return get_contributions(db, savings_id)

@router.get("/{savings_id}/progress", response_model=SavingsProgress)
async def savings_goal_progress(
    savings_id: str,
    frequency: Frequency = Query(Frequency.MONTHLY, description="Cadence for the suggested contribution"),
    db: Session = Depends(get_db_session)
):
    """
    Progress toward the target, suggested contribution and projected balance at the goal date.
    """
    return get_savings_progress(db, savings_id, frequency)
