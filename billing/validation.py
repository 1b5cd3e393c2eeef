"""Helpers that turn request JSON values into typed model values.

Each helper raises :class:`billing.errors.ValidationError` naming the
offending field; nothing here touches the database.
"""
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from flask import request

from billing.errors import ValidationError

EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


def is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def require_fields(data, fields):
    missing = [field for field in fields if is_blank(data.get(field))]
    if missing:
        raise ValidationError.missing(missing)


def parse_int(value, field, minimum=None):
    if isinstance(value, bool):
        raise ValidationError(f"{field} doit être un nombre entier", field=field)
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"{field} doit être un nombre entier", field=field)
    if minimum is not None and number < minimum:
        raise ValidationError(f"{field} doit être supérieur ou égal à {minimum}", field=field)
    return number


def parse_decimal(value, field, minimum=None, maximum=None, default=None):
    if is_blank(value):
        if default is not None:
            return Decimal(str(default))
        raise ValidationError.missing([field])
    if isinstance(value, bool):
        raise ValidationError(f"{field} doit être un nombre", field=field)
    try:
        number = Decimal(str(value).strip().replace(',', '.'))
    except InvalidOperation:
        raise ValidationError(f"{field} doit être un nombre", field=field)
    if not number.is_finite():
        raise ValidationError(f"{field} doit être un nombre", field=field)
    if minimum is not None and number < minimum:
        raise ValidationError(f"{field} doit être supérieur ou égal à {minimum}", field=field)
    if maximum is not None and number > maximum:
        raise ValidationError(f"{field} doit être inférieur ou égal à {maximum}", field=field)
    return number


def parse_percent(value, field, default=0):
    return parse_decimal(value, field, minimum=0, maximum=100, default=default)


def parse_date(value, field):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        # Accepts "2025-01-31" and full ISO timestamps from the dashboard
        return datetime.fromisoformat(str(value).strip().replace('Z', '+00:00')).date()
    except ValueError:
        raise ValidationError(f"{field} doit être une date ISO 8601", field=field)


def parse_datetime(value, field):
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).strip().replace('Z', '+00:00'))
    except ValueError:
        raise ValidationError(f"{field} doit être une date ISO 8601", field=field)


def parse_enum(enum_cls, value, field):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ', '.join(member.value for member in enum_cls)
        raise ValidationError(f"{field} invalide (valeurs possibles : {allowed})", field=field)


def parse_bool(value, default=True):
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes', 'oui', 'on')
    return bool(value)


def parse_str(value, field, strip=True):
    """``value`` as text; ``None`` passes through, other non-strings are rejected."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} doit être une chaîne de caractères", field=field)
    return value.strip() if strip else value


def validate_email(value, field='email'):
    value = parse_str(value, field)
    if not EMAIL_RE.match(value or ''):
        raise ValidationError("Format d'email invalide", field=field)
    return value


def json_body():
    """The request's JSON object, or ``{}`` when the body is empty."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Le corps de la requête doit être un objet JSON')
    return data
