import pytest
from fastapi import status, HTTPException
from datetime import date, datetime, timedelta
from sqlalchemy.orm import Session
from pydantic import ValidationError
from unittest.mock import patch

from backend.app.models.models import Savings, SavingsContribution, ContributionSource, Frequency
from backend.app.schemas.savings import SavingsCreate, SavingsUpdate, ContributionCreate
from backend.app.services.savings_service import (
    create_savings,
    get_savings_goals,
    get_savings,
    update_savings,
    delete_savings,
    add_contribution,
    get_contributions,
    delete_contribution,
    savings_progress,
    remaining_amount,
    is_goal_reached,
    days_until_goal,
    suggested_contribution,
    projected_amount,
    contribution_summary,
    get_savings_progress,
    has_recurring_contributions,
    savings_status_color
)

TODAY = date(2024, 6, 1)


def goal(target=None, current=0.0, goal_date=None, amount=None, frequency=None):
    return Savings(
        name="Goal",
        target_amount=target,
        current_amount=current,
        goal_date=goal_date,
        recurring_contribution_amount=amount,
        recurring_contribution_frequency=frequency
    )


# Schema tests
def test_recurring_amount_requires_frequency():
    with pytest.raises(ValidationError):
        SavingsCreate(name="Car", recurring_contribution_amount=100.0)


def test_frequency_dropped_without_amount():
    savings = SavingsCreate(name="Car", recurring_contribution_frequency=Frequency.WEEKLY)
    assert savings.recurring_contribution_frequency is None


# Service layer tests
def test_create_savings(db_session: Session, test_budget):
    """Test creating a savings goal"""
    savings = create_savings(db_session, SavingsCreate(
        name="Vacation",
        target_amount=2000.0,
        linked_budget_ids=[test_budget.id, test_budget.id],
        recurring_contribution_amount=50.0,
        recurring_contribution_frequency=Frequency.WEEKLY
    ))

    assert savings.id is not None
    assert savings.current_amount == 0.0
    assert savings.linked_budget_ids == [test_budget.id]
    assert savings.recurring_contribution_frequency == Frequency.WEEKLY


def test_create_savings_without_target(db_session: Session):
    savings = create_savings(db_session, SavingsCreate(name="Rainy day"))

    assert savings.target_amount is None
    assert savings_progress(savings) == 0.0
    assert is_goal_reached(savings) is False


def test_get_savings_goals_by_budget(db_session: Session, test_savings, test_budget):
    create_savings(db_session, SavingsCreate(name="Unlinked"))

    assert len(get_savings_goals(db_session)) == 2
    assert [s.id for s in get_savings_goals(db_session, test_budget.id)] == [test_savings.id]


def test_get_savings_not_found(db_session: Session):
    with pytest.raises(HTTPException) as exc_info:
        get_savings(db_session, "missing")

    assert exc_info.value.status_code == 404
    assert exc_info.value.detail == "Savings goal not found"


def test_update_savings_partial(db_session: Session, test_savings):
    """Only the fields sent are changed"""
    updated = update_savings(db_session, test_savings.id, SavingsUpdate(recurring_contribution_amount=400.0))

    assert updated.recurring_contribution_amount == 400.0
    assert updated.recurring_contribution_frequency == Frequency.MONTHLY
    assert updated.target_amount == 5000.0
    assert updated.updated_at is not None


def test_update_savings_amount_without_frequency(db_session: Session):
    savings = create_savings(db_session, SavingsCreate(name="Bike"))

    with pytest.raises(HTTPException) as exc_info:
        update_savings(db_session, savings.id, SavingsUpdate(recurring_contribution_amount=25.0))

    assert exc_info.value.status_code == 400


def test_add_contribution(db_session: Session, test_savings):
    contribution = add_contribution(db_session, test_savings.id, ContributionCreate(
        amount=250.0,
        date=TODAY,
        description="Bonus"
    ))

    assert contribution.id is not None
    assert contribution.source == ContributionSource.MANUAL

    db_session.refresh(test_savings)
    assert test_savings.current_amount == 1250.0
    assert [c.id for c in get_contributions(db_session, test_savings.id)] == [contribution.id]


def test_budget_remainder_contribution_requires_budget(db_session: Session, test_savings):
    with pytest.raises(HTTPException) as exc_info:
        add_contribution(db_session, test_savings.id, ContributionCreate(
            amount=50.0,
            date=TODAY,
            source=ContributionSource.BUDGET_REMAINDER
        ))

    assert exc_info.value.status_code == 400


def test_delete_contribution(db_session: Session, test_savings):
    contribution = add_contribution(db_session, test_savings.id, ContributionCreate(amount=200.0, date=TODAY))

    result = delete_contribution(db_session, contribution.id)

    assert result["success"] is True
    db_session.refresh(test_savings)
    assert test_savings.current_amount == 1000.0


def test_delete_contribution_cannot_go_negative(db_session: Session):
    savings = create_savings(db_session, SavingsCreate(name="Laptop"))
    contribution = add_contribution(db_session, savings.id, ContributionCreate(amount=100.0, date=TODAY))

    savings.current_amount = 50.0
    db_session.commit()

    with pytest.raises(HTTPException) as exc_info:
        delete_contribution(db_session, contribution.id)

    assert exc_info.value.status_code == 400


def test_delete_missing_contribution(db_session: Session):
    with pytest.raises(HTTPException) as exc_info:
        delete_contribution(db_session, "missing")

    assert exc_info.value.status_code == 404
    assert exc_info.value.detail == "Contribution not found"


def test_delete_savings_removes_contributions(db_session: Session, test_savings):
    add_contribution(db_session, test_savings.id, ContributionCreate(amount=10.0, date=TODAY))

    result = delete_savings(db_session, test_savings.id)

    assert result["success"] is True
    assert db_session.query(SavingsContribution).count() == 0


def test_progress_helpers():
    savings = goal(target=5000.0, current=1000.0, goal_date=TODAY + timedelta(days=100))

    assert savings_progress(savings) == pytest.approx(20.0)
    assert remaining_amount(savings) == 4000.0
    assert is_goal_reached(savings) is False
    assert days_until_goal(savings, TODAY) == 100


def test_goal_reached_clamps_remaining():
    savings = goal(target=500.0, current=650.0)

    assert is_goal_reached(savings) is True
    assert remaining_amount(savings) == 0.0
    assert suggested_contribution(savings, Frequency.MONTHLY, TODAY) == 0.0


def test_suggested_contribution_spreads_over_days_left():
    savings = goal(target=5000.0, current=1000.0, goal_date=TODAY + timedelta(days=100))

    assert suggested_contribution(savings, Frequency.DAILY, TODAY) == pytest.approx(40.0)
    assert suggested_contribution(savings, Frequency.MONTHLY, TODAY) == pytest.approx(40.0 * 30.44)


def test_suggested_contribution_without_goal_date_uses_a_year():
    savings = goal(target=3650.0)

    assert suggested_contribution(savings, "daily", TODAY) == pytest.approx(10.0)


def test_suggested_contribution_with_past_goal_date_uses_a_year():
    savings = goal(target=3650.0, goal_date=TODAY - timedelta(days=5))

    assert days_until_goal(savings, TODAY) == -5
    assert suggested_contribution(savings, "weekly", TODAY) == pytest.approx(70.0)


def test_projected_amount():
    savings = goal(
        target=5000.0,
        current=1000.0,
        goal_date=TODAY + timedelta(days=70),
        amount=70.0,
        frequency=Frequency.WEEKLY
    )

    assert projected_amount(savings, TODAY) == pytest.approx(1700.0)
    assert projected_amount(goal(current=20.0), TODAY) == 20.0


def test_contribution_summary():
    contributions = [
        SavingsContribution(amount=100.0, source=ContributionSource.MANUAL),
        SavingsContribution(amount=40.0, source=ContributionSource.BUDGET_REMAINDER),
        SavingsContribution(amount=60.0, source=ContributionSource.MANUAL),
    ]

    summary = contribution_summary(contributions)

    assert summary["manual"] == 160.0
    assert summary["budget_remainder"] == 40.0
    assert summary["income"] == 0.0


def test_get_savings_progress(db_session: Session, test_savings):
    progress = get_savings_progress(db_session, test_savings.id, Frequency.MONTHLY, TODAY)

    assert progress["progress_percent"] == pytest.approx(20.0)
    assert progress["remaining_amount"] == 4000.0
    assert progress["days_until_goal"] is None
    assert progress["suggested_contribution"] == pytest.approx(4000.0 / 365 * 30.44)
    assert progress["projected_amount"] == 1000.0


# API layer tests
def test_create_savings_endpoint(client, test_budget):
    """Test POST /savings endpoint"""
    response = client.post(
        "/api/v1/savings/",
        json={
            "name": "House",
            "target_amount": 20000.0,
            "linked_budget_ids": [test_budget.id],
            "recurring_contribution_amount": 500.0,
            "recurring_contribution_frequency": "monthly"
        }
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["name"] == "House"
    assert data["current_amount"] == 0.0
    assert data["linked_budget_ids"] == [test_budget.id]


def test_create_savings_missing_frequency_endpoint(client):
    response = client.post(
        "/api/v1/savings/",
        json={"name": "House", "recurring_contribution_amount": 500.0}
    )

    assert response.status_code == 422


def test_list_savings_endpoint(client, test_savings, test_budget):
    response = client.get(f"/api/v1/savings/?budget_id={test_budget.id}")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert len(data) == 1
    assert data[0]["id"] == test_savings.id


def test_update_savings_endpoint(client, test_savings):
    response = client.put(
        f"/api/v1/savings/{test_savings.id}",
        json={"recurring_contribution_amount": None}
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["recurring_contribution_amount"] is None
    assert data["recurring_contribution_frequency"] is None


def test_contribution_endpoints(client, test_savings):
    response = client.post(
        f"/api/v1/savings/{test_savings.id}/contributions",
        json={"amount": 75.0, "date": TODAY.isoformat()}
    )

    assert response.status_code == status.HTTP_200_OK
    contribution_id = response.json()["id"]

    response = client.get(f"/api/v1/savings/{test_savings.id}")
    assert response.json()["current_amount"] == 1075.0

    response = client.get(f"/api/v1/savings/{test_savings.id}/contributions")
    assert [c["id"] for c in response.json()] == [contribution_id]

    response = client.delete(f"/api/v1/savings/contributions/{contribution_id}")
    assert response.status_code == status.HTTP_200_OK

    response = client.get(f"/api/v1/savings/{test_savings.id}")
    assert response.json()["current_amount"] == 1000.0


def test_progress_endpoint(client, test_savings):
    response = client.get(f"/api/v1/savings/{test_savings.id}/progress?frequency=weekly")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["progress_percent"] == pytest.approx(20.0)
    assert data["suggested_frequency"] == "weekly"
    assert data["suggested_contribution"] == pytest.approx(4000.0 / 365 * 7)


def test_delete_savings_endpoint(client, test_savings):
    response = client.delete(f"/api/v1/savings/{test_savings.id}")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["success"] is True

    response = client.get(f"/api/v1/savings/{test_savings.id}")
    assert response.status_code == status.HTTP_404_NOT_FOUND


@patch('backend.app.services.savings_service.date')
def test_progress_endpoint_counts_days_from_today(mock_date, client, test_savings, db_session):
    mock_date.today.return_value = TODAY
    test_savings.goal_date = TODAY + timedelta(days=100)
    db_session.commit()

    response = client.get(f"/api/v1/savings/{test_savings.id}/progress?frequency=daily")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["days_until_goal"] == 100
    assert data["suggested_contribution"] == pytest.approx(40.0)
    assert data["projected_amount"] == pytest.approx(1000.0 + 300.0 / 30.44 * 100)


@pytest.mark.parametrize("field", ["name", "linked_budget_ids", "auto_contribute"])
def test_update_savings_rejects_null_for_required_field(client, test_savings, test_budget, field):
    response = client.put(f"/api/v1/savings/{test_savings.id}", json={field: None})

    assert response.status_code == 422

    response = client.get("/api/v1/savings/")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()[0]["linked_budget_ids"] == [test_budget.id]


def test_has_recurring_contributions():
    assert has_recurring_contributions(goal(amount=50.0, frequency=Frequency.WEEKLY)) is True
    assert has_recurring_contributions(goal()) is False
    assert has_recurring_contributions(goal(amount=50.0, frequency=Frequency.NONE)) is False


def started_goal(current, days_ago=50, days_left=50):
    savings = goal(target=1000.0, current=current, goal_date=TODAY + timedelta(days=days_left))
    savings.created_at = datetime.combine(TODAY - timedelta(days=days_ago), datetime.min.time())
    return savings


@pytest.mark.parametrize("current,color", [
    (500.0, "green"),   # exactly on pace, half the time gone
    (450.0, "yellow"),  # within 80% of pace
    (300.0, "orange"),  # behind
    (1000.0, "green"),  # reached
])
def test_savings_status_color(current, color):
    assert savings_status_color(started_goal(current), TODAY) == color


def test_savings_status_color_without_deadline():
    assert savings_status_color(goal(target=1000.0, current=10.0), TODAY) == "blue"
    assert savings_status_color(goal(target=1000.0, current=1000.0), TODAY) == "green"


def test_progress_reports_status_and_recurring(db_session: Session, test_savings):
    progress = get_savings_progress(db_session, test_savings.id, Frequency.MONTHLY, TODAY)

    assert progress["has_recurring_contributions"] is True
    assert progress["status_color"] == "blue"
