from fastapi import APIRouter, HTTPException, Query

from backend.app.models.models import Frequency
from backend.app.schemas.periods import PeriodConversion
from backend.app.services.period_service import scale_amount, is_one_time

router = APIRouter()

@router.get("/convert", response_model=PeriodConversion)
async def convert_period_amount(
    amount: float = Query(..., ge=0, description="Amount recorded at the source cadence"),
    source: Frequency = Query(..., description="Cadence the amount recurs at; none for a one-off amount"),
    target: Frequency = Query(..., description="Cadence to express the amount in")
):
    """
    Convert an amount between cadences by day count.

    - weekly = 7 days, biweekly = 14, monthly = 30.44, yearly = 365.25
    - A one-off amount (source=none) is returned unchanged
    """
    if is_one_time(target):
        raise HTTPException(status_code=400, detail="target must be a recurring cadence")

    return {
        "amount": amount,
        "source": source,
        "target": target,
        "converted_amount": scale_amount(amount, source, target)
    }
