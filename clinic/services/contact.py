"""
Contact link builders.

The portal hands out ``wa.me`` and ``tel:`` links rather than sending
messages itself; the client opens them.
"""
from __future__ import annotations

import re
from typing import Iterable, Optional
from urllib.parse import quote

from django.conf import settings

_NON_DIGITS = re.compile(r'\D')


def whatsapp_link(phone: Optional[str], message: str) -> Optional[str]:
    """Return a ``wa.me`` link for ``phone`` or None when it has no digits."""
    digits = _NON_DIGITS.sub('', phone or '')
    if not digits:
        return None
    return f"https://wa.me/{digits}?text={quote(message, safe='')}"


def tel_link(phone: Optional[str]) -> Optional[str]:
    phone = (phone or '').strip()
    return f"tel:{phone}" if phone else None


def support_link(message: str) -> Optional[str]:
    return whatsapp_link(settings.SUPPORT_WHATSAPP_NUMBER, message)


def appointment_message(name: str) -> str:
    return f"Hi {name}, this is regarding our appointment. Please let me know if you have any questions."


def patient_followup_message(patient_name: str, doctor_name: str) -> str:
    return f"Hi {patient_name}, this is Dr. {doctor_name}. I wanted to follow up regarding your healthcare."


def slot_patient_message(patient_name: str, doctor_name: str) -> str:
    return f"Hi {patient_name}, this is Dr. {doctor_name}. Regarding your upcoming appointment."


def doctor_support_message(doctor_name: str, specialization: Optional[str] = None) -> str:
    suffix = f" ({specialization})" if specialization else ''
    return f"Hi, I need help regarding Dr. {doctor_name}{suffix}. Please assist me."


EMERGENCY_MESSAGE = 'Emergency assistance needed'
PRESCRIPTION_SUPPORT_MESSAGE = 'Hi, I need help with my prescription. Please assist me.'


def prescription_message(*, patient_name: str, doctor_name: str, diagnosis: str,
                         medications: Iterable[dict], notes: Optional[str] = None) -> str:
    lines = '\n'.join(
        f"• {m['name']} - {m['dosage']} {m['frequency']} for {m['duration']}" for m in medications
    )
    text = (
        "🏥 Health Portal - New Prescription\n\n"
        f"Dear {patient_name},\n\n"
        f"Dr. {doctor_name} has prescribed:\n\n"
        f"📋 Diagnosis: {diagnosis}\n\n"
        f"💊 Medications:\n{lines}\n\n"
    )
    if notes:
        text += f"📝 Notes: {notes}\n\n"
    text += "Please follow the instructions carefully. For any queries, contact your doctor."
    return text
