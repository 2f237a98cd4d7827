"""
Field validation for the wizard steps.

Field definitions come from the form definition JSON (see wizard/engine.py).
Each validator returns a message string on failure, None when the value is OK.
Messages are user-facing and shown inline next to the field.
"""

import re
from typing import Optional

from .pricing import MAX_ROOM_COUNT

REQUIRED_MESSAGE = "Campo obrigatório."
PHONE_MESSAGE = "Número de telefone inválido. Use o formato (99) 9 1111-1111"
TERMS_MESSAGE = "Você deve aceitar os termos"
CHOICE_MESSAGE = "Opção inválida."
COUNTER_MESSAGE = f"Quantidade deve estar entre 0 e {MAX_ROOM_COUNT}."

PHONE_PATTERN = re.compile(r"^\(\d{2}\) \d \d{4}-\d{4}$")
MAX_PHONE_DIGITS = 11  # 2-digit area code + 9-digit mobile


def format_phone_number(phone: str) -> str:
    """
    Progressive Brazilian mobile formatting, applied as the user types.

    '61'          -> '61'
    '619'         -> '(61) 9'
    '61912345678' -> '(61) 9 1234-5678'
    Extra digits past eleven are dropped.
    """
    digits = re.sub(r"[^\d]+", "", phone or "")
    digits = digits[:MAX_PHONE_DIGITS]
    if len(digits) > 6:
        return f"({digits[:2]}) {digits[2:3]} {digits[3:7]}-{digits[7:]}"
    if len(digits) > 2:
        return f"({digits[:2]}) {digits[2:]}"
    return digits


def validate_phone_number(phone: str) -> bool:
    """True only for the complete '(99) 9 1111-1111' shape."""
    return bool(PHONE_PATTERN.match(phone or ""))


def redact(value: str) -> str:
    """Mask contact data for logging. Shows first 3 and last 2 chars only."""
    if not value or len(value) <= 5:
        return "***"
    return value[:3] + "***" + value[-2:]


def _validate_text(field: dict, value) -> Optional[str]:
    if not isinstance(value, str) or not value.strip():
        return field.get("message", REQUIRED_MESSAGE) if field.get("required") else None
    return None


def _validate_phone(field: dict, value) -> Optional[str]:
    if not isinstance(value, str) or not validate_phone_number(value):
        return field.get("message", PHONE_MESSAGE)
    return None


def _validate_boolean(field: dict, value) -> Optional[str]:
    if field.get("must_be_true") and value is not True:
        return field.get("message", TERMS_MESSAGE)
    return None


def _validate_choice(field: dict, value) -> Optional[str]:
    if not isinstance(value, str) or not value:
        return REQUIRED_MESSAGE if field.get("required") else None
    allowed = [opt["value"] for opt in field.get("options", [])]
    if value not in allowed:
        return CHOICE_MESSAGE
    return None


def _validate_counter(field: dict, value) -> Optional[str]:
    if isinstance(value, bool) or not isinstance(value, int):
        return COUNTER_MESSAGE
    if value < 0 or value > field.get("max", MAX_ROOM_COUNT):
        return COUNTER_MESSAGE
    return None


VALIDATORS = {
    "text": _validate_text,
    "email": _validate_text,
    "phone": _validate_phone,
    "boolean": _validate_boolean,
    "choice": _validate_choice,
    "counter": _validate_counter,
}


def validate_fields(fields: list[dict], values: dict) -> dict:
    """
    Validate values against a list of field definitions.

    Returns {field_id: message} for every failing field, in definition order.
    An empty dict means the step is valid.
    """
    errors = {}
    for field in fields:
        validator = VALIDATORS.get(field["type"])
        if validator is None:
            raise ValueError(f"No validator for field type: {field['type']}")
        message = validator(field, values.get(field["id"]))
        if message:
            errors[field["id"]] = message
    return errors
