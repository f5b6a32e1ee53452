from __future__ import annotations

from dataclasses import dataclass
from html import escape
from typing import Any, Dict, List, Tuple

from voice_intake.intake.schema import IntakeForm


EMPTY_VALUE = "-"
FOOTER = "This intake was submitted via voice session."

PATIENT_FIELDS: List[Tuple[str, str]] = [
    ("First name", "first_name"),
    ("Last name", "last_name"),
    ("Date of birth", "date_of_birth"),
    ("Address", "address"),
    ("City", "city"),
    ("State", "state"),
    ("ZIP", "zip_code"),
    ("Phone", "phone_home"),
    ("Email", "email"),
    ("Gender", "gender"),
    ("Language", "language"),
    ("Race", "race"),
    ("Marital status", "marital_status"),
    ("Referred by", "referred_by"),
]

EMERGENCY_FIELDS: List[Tuple[str, str]] = [
    ("Name", "name"),
    ("Phone", "phone"),
    ("Relation", "relation"),
]

# Free-form sections, only rendered when they have at least one filled entry.
OPTIONAL_SECTIONS: List[Tuple[str, str]] = [
    ("Medical history", "medical_history"),
    ("Medications", "medications"),
    ("Allergies", "allergies"),
    ("Vaccinations", "vaccinations"),
]


@dataclass
class IntakeSummary:
    subject: str
    html: str
    text: str


def format_value(value: Any) -> str:
    if value is None or value == "":
        return EMPTY_VALUE
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value) if value else EMPTY_VALUE
    return str(value)


def _is_filled(value: Any) -> bool:
    if value is None or value == "":
        return False
    if isinstance(value, (list, tuple)):
        return len(value) > 0
    return True


def _filled_entries(section: Dict[str, Any]) -> List[Tuple[str, str]]:
    return [
        (key.replace("_", " "), format_value(value))
        for key, value in section.items()
        if _is_filled(value)
    ]


def build_subject(form: IntakeForm, room_name: str) -> str:
    patient_name = form.patient.full_name
    if patient_name:
        return f"Intake summary - {patient_name} ({room_name})"
    return f"Intake summary - {room_name}"


def _collect_sections(form: IntakeForm) -> List[Tuple[str, List[Tuple[str, str]]]]:
    """
    Build (title, [(label, value), ...]) pairs in display order.

    Patient and emergency contact always show every field; the free-form
    sections are skipped when empty.
    """
    sections: List[Tuple[str, List[Tuple[str, str]]]] = [
        (
            "Patient",
            [(label, format_value(getattr(form.patient, attr))) for label, attr in PATIENT_FIELDS],
        ),
        (
            "Emergency contact",
            [
                (label, format_value(getattr(form.emergency_contact, attr)))
                for label, attr in EMERGENCY_FIELDS
            ],
        ),
    ]

    for title, attr in OPTIONAL_SECTIONS:
        entries = _filled_entries(getattr(form, attr))
        if entries:
            sections.append((title, entries))

    return sections


def _render_html(
    room_name: str,
    patient_name: str,
    sections: List[Tuple[str, List[Tuple[str, str]]]],
) -> str:
    parts: List[str] = [
        "<html><body style=\"background-color:#f6f9fc;font-family:sans-serif;padding:24px;\">",
        "<h1 style=\"color:#1a1a1a;font-size:24px;\">Intake Summary</h1>",
        f"<p><strong>Room:</strong> {escape(room_name)}</p>",
        f"<p><strong>Patient:</strong> {escape(patient_name)}</p>",
        "<hr>",
    ]

    for title, rows in sections:
        parts.append(
            "<div style=\"background-color:#ffffff;border-radius:8px;"
            "margin-bottom:16px;padding:20px;\">"
        )
        parts.append(
            f"<p style=\"font-weight:600;text-transform:uppercase;\">{escape(title)}</p>"
        )
        parts.append("<table>")
        for label, value in rows:
            parts.append(
                f"<tr><td style=\"color:#525f7f;width:140px;\">{escape(label)}</td>"
                f"<td>{escape(value)}</td></tr>"
            )
        parts.append("</table></div>")

    parts.append("<hr>")
    parts.append(f"<p style=\"color:#8898aa;font-size:12px;\">{FOOTER}</p>")
    parts.append("</body></html>")
    return "\n".join(parts)


def _render_text(
    room_name: str,
    patient_name: str,
    sections: List[Tuple[str, List[Tuple[str, str]]]],
) -> str:
    lines: List[str] = [
        "Intake Summary",
        f"Room: {room_name}",
        f"Patient: {patient_name}",
        "",
    ]
    for title, rows in sections:
        lines.append(title.upper())
        for label, value in rows:
            lines.append(f"  {label}: {value}")
        lines.append("")
    lines.append(FOOTER)
    return "\n".join(lines)


def build_intake_summary(
    intake: Dict[str, Any],
    room_name: str,
) -> IntakeSummary:
    """
    Render the notification email for one intake submission.
    """
    form = IntakeForm.from_payload(intake)
    patient_name = form.patient.full_name or EMPTY_VALUE
    sections = _collect_sections(form)

    return IntakeSummary(
        subject=build_subject(form, room_name),
        html=_render_html(room_name, patient_name, sections),
        text=_render_text(room_name, patient_name, sections),
    )
