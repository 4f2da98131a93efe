from typing import Optional, List, Dict
from django.conf import settings

DEFAULT_DOCTOR_NAME = 'Doctor'


def roster() -> List[Dict]:
    return list(getattr(settings, 'MEDFLOW_DOCTORS', []) or [])


def departments() -> List[str]:
    return list(getattr(settings, 'MEDFLOW_DEPARTMENTS', []) or [])


def list_doctors(dept: Optional[str] = None) -> List[Dict]:
    docs = roster()
    if dept:
        docs = [d for d in docs if d.get('dept') == dept]
    return [{
        'id': str(d.get('id')),
        'name': d.get('name') or DEFAULT_DOCTOR_NAME,
        'dept': d.get('dept'),
        'status': d.get('status', 'available'),
    } for d in docs]


def find_available(dept: str) -> Optional[str]:
    """Return the id of the first available doctor in ``dept``, if any."""
    for d in roster():
        if d.get('dept') == dept and d.get('status') == 'available':
            return str(d.get('id'))
    return None


def doctor_name(doctor_id) -> str:
    if doctor_id in (None, ''):
        return DEFAULT_DOCTOR_NAME
    for d in roster():
        if str(d.get('id')) == str(doctor_id):
            return d.get('name') or DEFAULT_DOCTOR_NAME
    return DEFAULT_DOCTOR_NAME
