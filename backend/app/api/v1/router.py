from fastapi import APIRouter
from backend.app.api.v1 import expenses, budgets, savings, periods

api_router = APIRouter()
api_router.include_router(expenses.router, prefix="/expenses", tags=["expenses"])
api_router.include_router(budgets.router, prefix="/budgets", tags=["budgets"])
api_router.include_router(savings.router, prefix="/savings", tags=["savings"])
api_router.include_router(periods.router, prefix="/periods", tags=["periods"])
