"""
Wizard API: drives one lead through the budget calculator steps.

GET  /api/wizard/definition                     - Steps, fields, options, rates
POST /api/wizard/start                          - New session at the intro step
GET  /api/wizard/{id}                           - Current state + live estimate
POST /api/wizard/{id}/next                      - Validate current step, advance
POST /api/wizard/{id}/back                      - Previous step
POST /api/wizard/{id}/rooms/{room}/increment    - Counter +1 (max 5)
POST /api/wizard/{id}/rooms/{room}/decrement    - Counter -1 (min 0)
POST /api/wizard/{id}/submit                    - Validate options, price, send lead
"""

import logging
import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from .. import models, schemas
from ..database import get_db
from ..form_submission import FormSubmissionError, submit_form
from ..pricing import PRICE_PER_M2, price_for_tier
from ..validation import redact
from ..wizard.engine import FormWizard, StepValidationError, WizardStep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/wizard", tags=["wizard"])

# Singleton wizard: cached definition, no per-lead state
wizard = FormWizard()

GENERIC_ERROR = "Algo deu errado. Tente novamente mais tarde."


def _get_session(db: Session, session_id: str) -> models.FormSession:
    session = db.query(models.FormSession).filter(
        models.FormSession.id == session_id,
    ).first()
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def _require_active(session: models.FormSession):
    if session.status != models.SessionStatus.ACTIVE.value:
        raise HTTPException(status_code=409, detail=GENERIC_ERROR)
    if session.submitting:
        raise HTTPException(status_code=409, detail="Submission already in progress")


def _store_step_values(session: models.FormSession, step: int, values: dict):
    """Merge normalized values into the stored values of one step."""
    all_values = dict(session.values_json or {})
    name = wizard.step_name(step)
    step_values = dict(all_values.get(name, {}))
    step_values.update(values)
    all_values[name] = step_values
    session.values_json = all_values
    session.updated_at = datetime.utcnow()
    flag_modified(session, "values_json")


def _serialize(session: models.FormSession) -> dict:
    values = session.values_json or {}
    step = session.step
    return {
        "session_id": session.id,
        "step": step,
        "step_name": wizard.step_name(step),
        "values": values.get(wizard.step_name(step), {}),
        "all_values": values,
        "progress": wizard.get_progress(step),
        "can_go_back": step > WizardStep.CONTACT,
        "estimate": wizard.preview_estimate(values),
        "status": session.status,
        "submitting": bool(session.submitting),
        "error": bool(session.error),
        "created_at": session.created_at.isoformat() if session.created_at else None,
        "updated_at": session.updated_at.isoformat() if session.updated_at else None,
    }


# --- Endpoints ---

@router.get("/definition")
def get_definition():
    """Everything a client needs to render the wizard."""
    definition = wizard.load_definition()
    return {
        "form_id": definition["form_id"],
        "display_name": definition["display_name"],
        "subtitle": definition.get("subtitle", ""),
        "steps": definition["steps"],
        "price_per_m2": PRICE_PER_M2,
    }


@router.post("/start")
def start_session(db: Session = Depends(get_db)):
    """Create a session at the intro step with blank values."""
    session = models.FormSession(
        id=str(uuid.uuid4()),
        step=WizardStep.INTRO,
        values_json=wizard.default_values(),
        status=models.SessionStatus.ACTIVE.value,
        submitting=False,
        error=False,
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    logger.info("Wizard session started: %s", session.id)
    return _serialize(session)


@router.get("/{session_id}")
def get_session_state(session_id: str, db: Session = Depends(get_db)):
    return _serialize(_get_session(db, session_id))


@router.post("/{session_id}/next")
def next_step(session_id: str, request: schemas.StepValues, db: Session = Depends(get_db)):
    """
    Validate the current step and move forward.

    Values are stored even when validation fails so the form keeps what the
    user typed. Failures return 422 with {"step", "errors": {field_id: message}}.
    """
    session = _get_session(db, session_id)
    _require_active(session)

    step = session.step
    if step == WizardStep.OPTIONS:
        raise HTTPException(status_code=400, detail="Final step must be submitted, not advanced")

    normalized = wizard.normalize(step, request.values)
    _store_step_values(session, step, normalized)
    step_values = session.values_json[wizard.step_name(step)]

    try:
        session.step = wizard.advance(step, step_values)
    except StepValidationError as e:
        db.commit()
        raise HTTPException(status_code=422, detail={"step": e.step, "errors": e.errors})

    db.commit()
    db.refresh(session)
    return _serialize(session)


@router.post("/{session_id}/back")
def previous_step(session_id: str, db: Session = Depends(get_db)):
    session = _get_session(db, session_id)
    _require_active(session)
    try:
        session.step = wizard.go_back(session.step)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    session.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(session)
    return _serialize(session)


def _adjust_room(session_id: str, room_id: str, delta: int, db: Session) -> dict:
    session = _get_session(db, session_id)
    _require_active(session)
    if session.step != WizardStep.ROOMS:
        raise HTTPException(status_code=400, detail="Room counters are only editable on the rooms step")

    rooms_name = wizard.step_name(WizardStep.ROOMS)
    counts = (session.values_json or {}).get(rooms_name, {})
    try:
        updated = wizard.adjust_counter(counts, room_id, delta)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    _store_step_values(session, WizardStep.ROOMS, updated)
    db.commit()
    db.refresh(session)
    return _serialize(session)


@router.post("/{session_id}/rooms/{room_id}/increment")
def increment_room(session_id: str, room_id: str, db: Session = Depends(get_db)):
    return _adjust_room(session_id, room_id, 1, db)


@router.post("/{session_id}/rooms/{room_id}/decrement")
def decrement_room(session_id: str, room_id: str, db: Session = Depends(get_db)):
    return _adjust_room(session_id, room_id, -1, db)


@router.post("/{session_id}/submit", response_model=schemas.SubmissionResult)
def submit_session(session_id: str, request: schemas.StepValues, db: Session = Depends(get_db)):
    """
    Validate the options step, compute the estimate and send the lead.

    One request in flight per session (the `submitting` flag). On failure the
    session is marked as errored and further submissions are refused.
    On success the session is discarded.
    """
    session = _get_session(db, session_id)
    _require_active(session)

    if session.step != WizardStep.OPTIONS:
        raise HTTPException(status_code=400, detail="Session is not on the final step")

    normalized = wizard.normalize(WizardStep.OPTIONS, request.values)
    _store_step_values(session, WizardStep.OPTIONS, normalized)
    all_values = dict(session.values_json)

    errors = wizard.validate_step(WizardStep.OPTIONS, all_values[wizard.step_name(WizardStep.OPTIONS)])
    if errors:
        db.commit()
        raise HTTPException(status_code=422, detail={"step": int(WizardStep.OPTIONS), "errors": errors})

    incomplete = wizard.get_all_errors(all_values)
    if incomplete:
        db.commit()
        raise HTTPException(status_code=422, detail={"step": session.step, "errors": incomplete})

    flat = wizard.collect(all_values)
    estimate = wizard.preview_estimate(all_values)

    session.submitting = True
    db.commit()

    sent = False
    try:
        submit_form(flat, estimate)
        sent = True
    except FormSubmissionError as e:
        logger.error("Lead submission failed for session %s (%s): %s",
                     session_id, redact(flat.get("email", "")), e)
        raise HTTPException(status_code=502, detail=GENERIC_ERROR)
    finally:
        # Any failure, expected or not, leaves the session errored and not in flight
        if not sent:
            session.submitting = False
            session.error = True
            session.status = models.SessionStatus.ERROR.value
            session.updated_at = datetime.utcnow()
            db.commit()

    tier = flat.get("finish_tier")
    db.delete(session)
    db.commit()
    logger.info("Wizard session %s submitted and discarded", session_id)

    return {
        "submitted": True,
        "estimate": estimate,
        "finish_tier": tier,
        "selected_price": price_for_tier(estimate, tier),
    }
