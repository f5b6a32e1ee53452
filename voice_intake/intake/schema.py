from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class PatientInfo(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    middle_initial: Optional[str] = None
    date_of_birth: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    phone_home: Optional[str] = None
    email: Optional[str] = None
    gender: Optional[str] = None
    language: Optional[str] = None
    race: Optional[str] = None
    marital_status: Optional[str] = None
    referred_by: Optional[str] = None

    model_config = {"extra": "allow"}

    @property
    def full_name(self) -> Optional[str]:
        parts = [p.strip() for p in (self.first_name, self.last_name) if p and p.strip()]
        return " ".join(parts) or None


class EmergencyContact(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    relation: Optional[str] = None

    model_config = {"extra": "allow"}


class IntakeForm(BaseModel):
    """
    Read-only view of an intake payload as filled in by the voice agent.

    Only used to render summaries. The stored payload is the raw dict the
    client posted, so nothing here may drop or rewrite fields.
    """

    patient: PatientInfo = Field(default_factory=PatientInfo)
    emergency_contact: EmergencyContact = Field(default_factory=EmergencyContact)

    medical_history: Dict[str, Any] = Field(default_factory=dict)
    medications: Dict[str, Any] = Field(default_factory=dict)
    allergies: Dict[str, Any] = Field(default_factory=dict)
    vaccinations: Dict[str, Any] = Field(default_factory=dict)

    model_config = {
        "extra": "allow",
    }

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "IntakeForm":
        """
        Lenient parse: sections that are missing, null or of the wrong
        shape fall back to empty ones instead of failing the render.
        """
        cleaned: Dict[str, Any] = {}
        for key in ("patient", "emergency_contact"):
            value = payload.get(key)
            if isinstance(value, dict):
                cleaned[key] = {
                    k: v if v is None or isinstance(v, str) else str(v)
                    for k, v in value.items()
                }
        for key in ("medical_history", "medications", "allergies", "vaccinations"):
            value = payload.get(key)
            if isinstance(value, dict):
                cleaned[key] = value
        return cls.model_validate(cleaned)
