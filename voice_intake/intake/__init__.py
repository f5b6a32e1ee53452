from .schema import IntakeForm, PatientInfo, EmergencyContact
from .summary import IntakeSummary, build_intake_summary

__all__ = [
    "IntakeForm",
    "PatientInfo",
    "EmergencyContact",
    "IntakeSummary",
    "build_intake_summary",
]
