import os

# Point the application at the test database before it is imported
TEST_DATABASE_URL = "sqlite:///./test.db"
os.environ["DATABASE_URL"] = TEST_DATABASE_URL

import pytest
from datetime import date
from uuid import uuid4
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from backend.app.models.models import (
    Base, Expense, Budget, Savings, SavingsContribution,
    ExpenseCategory, Frequency, BudgetPeriod
)
from backend.app.database import get_db_session
from backend.app.main import app

@pytest.fixture(scope="session")
def db_engine():
    engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    yield engine
    # Teardown - drop all tables
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    if os.path.exists("./test.db"):
        os.remove("./test.db")

@pytest.fixture(scope="function")
def db_session(db_engine):
    """Returns a fresh SQLAlchemy session for each test"""
    Session = sessionmaker(bind=db_engine)
    session = Session()

    # Clear out test data from previous run
    session.query(SavingsContribution).delete()
    session.query(Savings).delete()
    session.query(Budget).delete()
    session.query(Expense).delete()
    session.commit()

    yield session
    session.close()

@pytest.fixture
def client(db_session):
    """Test client fixture that uses the db_session fixture"""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db_session] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()

@pytest.fixture
def test_expense(db_session):
    """Creates a weekly recurring grocery expense"""
    expense = Expense(
        id=str(uuid4()),
        title="Groceries",
        amount=100.0,
        category=ExpenseCategory.FOOD,
        date=date.today(),
        is_recurring=True,
        recurring_frequency=Frequency.WEEKLY
    )
    db_session.add(expense)
    db_session.commit()
    db_session.refresh(expense)
    return expense

@pytest.fixture
def one_time_expense(db_session):
    """Creates a one-time shopping expense"""
    expense = Expense(
        id=str(uuid4()),
        title="New shoes",
        amount=50.0,
        category=ExpenseCategory.SHOPPING,
        date=date.today(),
        is_recurring=False
    )
    db_session.add(expense)
    db_session.commit()
    db_session.refresh(expense)
    return expense

@pytest.fixture
def test_budget(db_session, test_expense):
    """Creates a monthly food budget linked to test_expense"""
    budget = Budget(
        id=str(uuid4()),
        name="Food",
        amount=1000.0,
        category=ExpenseCategory.FOOD,
        period=BudgetPeriod.MONTHLY,
        start_date=date.today(),
        alert_threshold=80.0,
        linked_expense_ids=[test_expense.id]
    )
    db_session.add(budget)
    db_session.commit()
    db_session.refresh(budget)
    return budget

@pytest.fixture
def test_savings(db_session, test_budget):
    """Creates a savings goal contributing 300/month against test_budget"""
    savings = Savings(
        id=str(uuid4()),
        name="Emergency Fund",
        target_amount=5000.0,
        current_amount=1000.0,
        linked_budget_ids=[test_budget.id],
        recurring_contribution_amount=300.0,
        recurring_contribution_frequency=Frequency.MONTHLY
    )
    db_session.add(savings)
    db_session.commit()
    db_session.refresh(savings)
    return savings
