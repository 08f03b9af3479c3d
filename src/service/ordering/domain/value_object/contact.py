import re

import attrs

from src.platform.exception.exceptions import ValidationError


_PHONE_PATTERN = re.compile(r'^\+?[0-9]{6,20}$')
_EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def normalize_phone(phone: str) -> str:
    return re.sub(r'[\s\-().]', '', phone or '')


@attrs.frozen
class Contact:
    name: str
    phone: str
    email: str

    @classmethod
    def create(cls, *, name: str, phone: str, email: str) -> 'Contact':
        clean_name = (name or '').strip()
        clean_phone = normalize_phone(phone)
        clean_email = (email or '').strip().lower()

        if not clean_name or len(clean_name) > 200:
            raise ValidationError('Contact name is required (max 200 characters)')
        if not _PHONE_PATTERN.match(clean_phone):
            raise ValidationError('Contact phone is invalid')
        if not _EMAIL_PATTERN.match(clean_email):
            raise ValidationError('Contact e-mail is invalid')

        return cls(name=clean_name, phone=clean_phone, email=clean_email)
