from pydantic import BaseModel

from backend.app.models.models import Frequency

class PeriodConversion(BaseModel):
    amount: float
    source: Frequency
    target: Frequency
    converted_amount: float
