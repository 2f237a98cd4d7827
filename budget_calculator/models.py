from sqlalchemy import Column, Integer, String, DateTime, Boolean, JSON
from datetime import datetime
from .database import Base
import enum


class SessionStatus(str, enum.Enum):
    ACTIVE = "active"
    ERROR = "error"


class FormSession(Base):
    """In-progress wizard state. Deleted once the lead is submitted."""
    __tablename__ = "form_sessions"

    id = Column(String, primary_key=True)  # UUID
    step = Column(Integer, default=0)
    values_json = Column(JSON, default=dict)  # {step_name: {field_id: value}}
    status = Column(String, default=SessionStatus.ACTIVE.value)
    submitting = Column(Boolean, default=False)
    error = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
