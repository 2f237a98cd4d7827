"""
Pricing: turns room counts into a floor area and three finish-tier prices.

Pure math. Each room type has a fixed area per unit; the total area is
multiplied by a fixed price per m² for each finish tier.

Input: {room_id: count} for the fourteen room types
Output: Estimate dict {"area_m2", "prata", "ouro", "diamante"}
"""

MAX_ROOM_COUNT = 5

# m² per unit, in the order the rooms step shows them
ROOM_AREAS_M2 = {
    "master_suite": 35,
    "suite": 30,
    "bedroom": 16,
    "living_room": 20,
    "office": 16,
    "kitchen": 20,
    "dining_room": 20,
    "powder_room": 3,
    "home_theater": 16,
    "gourmet_area": 40,
    "covered_garage": 20,
    "closet": 5,
    "storage_room": 6,
    "pool": 40,
}

# R$ per m²
PRICE_PER_M2 = {
    "prata": 3000,
    "ouro": 4000,
    "diamante": 5000,
}


def calculate_area(counts: dict) -> int:
    """Total floor area in m². Missing or zero counts contribute nothing."""
    area = 0
    for room_id, area_per_unit in ROOM_AREAS_M2.items():
        count = counts.get(room_id) or 0
        area += count * area_per_unit
    return area


def calculate_estimate(counts: dict) -> dict:
    """
    Price every finish tier for a set of room counts.

    Returns:
        {"area_m2": int, "prata": int, "ouro": int, "diamante": int}
    """
    area = calculate_area(counts)
    estimate = {"area_m2": area}
    for tier, price in PRICE_PER_M2.items():
        estimate[tier] = area * price
    return estimate


def price_for_tier(estimate: dict, tier: str) -> int:
    """Price of the selected finish tier, or raises ValueError."""
    if tier not in PRICE_PER_M2:
        raise ValueError(
            f"Unknown finish tier: {tier}. "
            f"Available: {list(PRICE_PER_M2.keys())}"
        )
    return estimate[tier]


def validate_counts(counts: dict) -> dict:
    """
    Check a {room_id: count} mapping.

    Returns {room_id: message} for every bad entry; empty dict when valid.
    Booleans are rejected even though they are ints in Python.
    """
    errors = {}
    for room_id, count in counts.items():
        if room_id not in ROOM_AREAS_M2:
            errors[room_id] = "Cômodo desconhecido."
        elif isinstance(count, bool) or not isinstance(count, int):
            errors[room_id] = "Quantidade deve ser um número inteiro."
        elif count < 0 or count > MAX_ROOM_COUNT:
            errors[room_id] = f"Quantidade deve estar entre 0 e {MAX_ROOM_COUNT}."
    return errors


def empty_counts() -> dict:
    """All fourteen counters at zero."""
    return {room_id: 0 for room_id in ROOM_AREAS_M2}
