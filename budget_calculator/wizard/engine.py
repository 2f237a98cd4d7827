"""
Form Wizard Engine: loads the form definition and walks a lead through its steps.

The wizard is a linear state machine over an integer step counter:

    0 intro → 1 contact → 2 property → 3 rooms → 4 options → submit

A step only advances when its fields validate. The last step is never advanced;
it is submitted (see routers/wizard.py). Values are kept per step name so going
back and forth never loses what the user already typed.
"""

import enum
import json
import logging
from pathlib import Path
from typing import Optional

from ..pricing import MAX_ROOM_COUNT, ROOM_AREAS_M2, calculate_estimate, empty_counts, validate_counts
from ..validation import format_phone_number, validate_fields

logger = logging.getLogger(__name__)

# Directory where form definition JSON files live
DATA_DIR = Path(__file__).parent / "data"
DEFAULT_FORM = "budget_form"


class WizardStep(enum.IntEnum):
    INTRO = 0
    CONTACT = 1
    PROPERTY = 2
    ROOMS = 3
    OPTIONS = 4


class StepValidationError(ValueError):
    """A step's values failed validation. Carries {field_id: message}."""

    def __init__(self, step: int, errors: dict):
        self.step = step
        self.errors = errors
        super().__init__(f"Step {step} has {len(errors)} invalid field(s): {', '.join(errors)}")


class FormWizard:
    """Core logic for the budget calculator wizard."""

    def __init__(self, form_id: str = DEFAULT_FORM):
        self.form_id = form_id
        self._definition: Optional[dict] = None

    def load_definition(self) -> dict:
        """Load the form definition JSON. Cached after first load."""
        if self._definition is not None:
            return self._definition

        filepath = DATA_DIR / f"{self.form_id}.json"
        if not filepath.exists():
            raise FileNotFoundError(f"No form definition found: {self.form_id}")

        with open(filepath, encoding="utf-8") as f:
            definition = json.load(f)

        # Counter areas and bounds come from the pricing table, not the JSON
        for step in definition["steps"]:
            for field in step["fields"]:
                if field["type"] != "counter":
                    continue
                if field["id"] not in ROOM_AREAS_M2:
                    raise ValueError(f"Counter '{field['id']}' has no area in the pricing table")
                field["area_m2"] = ROOM_AREAS_M2[field["id"]]
                field["min"] = 0
                field["max"] = MAX_ROOM_COUNT

        if len(definition["steps"]) != len(WizardStep):
            raise ValueError(
                f"Form {self.form_id} defines {len(definition['steps'])} steps, "
                f"expected {len(WizardStep)}"
            )

        self._definition = definition
        logger.debug("Loaded form definition %s v%s", self.form_id, definition.get("version"))
        return definition

    def list_steps(self) -> list[dict]:
        return self.load_definition()["steps"]

    def get_step(self, step: int) -> dict:
        """Return the step definition at an index, or raise ValueError."""
        steps = self.list_steps()
        if step < 0 or step >= len(steps):
            raise ValueError(f"No step {step}. Valid steps: 0-{len(steps) - 1}")
        return steps[step]

    def get_fields(self, step: int) -> list[dict]:
        return self.get_step(step)["fields"]

    def step_name(self, step: int) -> str:
        return self.get_step(step)["name"]

    def default_values(self) -> dict:
        """
        Blank values for every step: empty strings, unchecked consent, zero counters.

        Returns: {step_name: {field_id: default}}
        """
        counters = empty_counts()
        defaults = {}
        for step in self.list_steps():
            values = {}
            for field in step["fields"]:
                if field["type"] == "boolean":
                    values[field["id"]] = False
                elif field["type"] == "counter":
                    values[field["id"]] = counters[field["id"]]
                else:
                    values[field["id"]] = ""
            defaults[step["name"]] = values
        return defaults

    def normalize(self, step: int, values: dict) -> dict:
        """
        Coerce submitted values for a step. Unknown keys are dropped.

        - text/email/choice: stripped strings
        - phone: progressive (99) 9 1111-1111 formatting
        - counter: digit strings become ints; anything else is left for validation
        """
        normalized = {}
        for field in self.get_fields(step):
            fid = field["id"]
            if fid not in values:
                continue
            value = values[fid]
            ftype = field["type"]
            if ftype == "phone" and isinstance(value, str):
                value = format_phone_number(value)
            elif ftype in ("text", "email", "choice") and isinstance(value, str):
                value = value.strip()
            elif ftype == "counter" and isinstance(value, str) and value.strip().isdigit():
                value = int(value.strip())
            normalized[fid] = value
        return normalized

    def validate_step(self, step: int, values: dict) -> dict:
        """Return {field_id: message} for the step's failing fields."""
        return validate_fields(self.get_fields(step), values)

    def advance(self, step: int, values: dict) -> int:
        """
        Move forward one step if the current step validates.

        Raises StepValidationError with inline messages when it does not,
        and ValueError on the last step (which is submitted instead).
        """
        if step >= WizardStep.OPTIONS:
            raise ValueError("The final step is submitted, not advanced")
        errors = self.validate_step(step, values)
        if errors:
            raise StepValidationError(step, errors)
        return step + 1

    def go_back(self, step: int) -> int:
        """Previous step. Only the property, rooms and options steps have a back action."""
        if step <= WizardStep.CONTACT:
            raise ValueError(f"Step {step} has no previous step")
        return step - 1

    def adjust_counter(self, counts: dict, room_id: str, delta: int) -> dict:
        """Return a copy of counts with one counter moved by delta, clamped to 0..MAX_ROOM_COUNT."""
        if room_id not in ROOM_AREAS_M2:
            raise ValueError(
                f"Unknown room: {room_id}. Available: {list(ROOM_AREAS_M2.keys())}"
            )
        updated = dict(counts)
        current = updated.get(room_id) or 0
        if isinstance(current, bool) or not isinstance(current, int):
            current = 0
        updated[room_id] = max(0, min(MAX_ROOM_COUNT, current + delta))
        return updated

    def get_progress(self, step: int) -> list[dict]:
        """
        Step markers shown above the form. Hidden on the intro step.

        Each marker: {"label": 1-based index, "text", "selected", "show_text"}
        """
        if step == WizardStep.INTRO:
            return []
        markers = []
        for index, step_def in enumerate(self.list_steps()):
            if not step_def.get("marker"):
                continue
            markers.append({
                "label": index,
                "text": step_def["marker"],
                "selected": step >= index,
                "show_text": step == index,
            })
        return markers

    def is_complete(self, all_values: dict) -> bool:
        """Do all data-collecting steps validate?"""
        return not self.get_all_errors(all_values)

    def get_all_errors(self, all_values: dict) -> dict:
        """Return {step_name: errors} for every step that does not validate."""
        result = {}
        for index, step_def in enumerate(self.list_steps()):
            errors = self.validate_step(index, all_values.get(step_def["name"], {}))
            if errors:
                result[step_def["name"]] = errors
        return result

    def preview_estimate(self, all_values: dict) -> dict:
        """Live estimate from whatever valid room counts are set so far."""
        rooms = all_values.get(self.step_name(WizardStep.ROOMS), {})
        invalid = validate_counts(rooms)
        return calculate_estimate({k: v for k, v in rooms.items() if k not in invalid})

    def collect(self, all_values: dict) -> dict:
        """Flatten per-step values into one {field_id: value} dict."""
        flat = {}
        for step_def in self.list_steps():
            flat.update(all_values.get(step_def["name"], {}))
        return flat
