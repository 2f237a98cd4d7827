from pydantic import BaseModel
from typing import Optional


class StepValues(BaseModel):
    values: dict = {}  # {field_id: value, ...} for the current step


class EstimateRequest(BaseModel):
    rooms: dict = {}  # {room_id: count, ...}


class Estimate(BaseModel):
    area_m2: int
    prata: int
    ouro: int
    diamante: int


class SubmissionResult(BaseModel):
    submitted: bool
    estimate: Estimate
    finish_tier: Optional[str] = None
    selected_price: Optional[int] = None
