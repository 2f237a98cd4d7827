from fastapi import APIRouter, HTTPException

from .. import schemas
from ..pricing import MAX_ROOM_COUNT, PRICE_PER_M2, ROOM_AREAS_M2, calculate_estimate, validate_counts

router = APIRouter(prefix="/estimate", tags=["estimate"])


@router.get("/rates")
def get_rates():
    """Area per room type and price per m² per finish tier."""
    return {
        "room_areas_m2": ROOM_AREAS_M2,
        "price_per_m2": PRICE_PER_M2,
        "max_room_count": MAX_ROOM_COUNT,
    }


@router.post("/", response_model=schemas.Estimate)
def estimate(request: schemas.EstimateRequest):
    """Price a set of room counts without a wizard session."""
    errors = validate_counts(request.rooms)
    if errors:
        raise HTTPException(status_code=422, detail={"errors": errors})
    return calculate_estimate(request.rooms)
