import logging
import random
from datetime import date

from flask import current_app, has_app_context

from billing.errors import DocumentNumberConflict

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 50


def generate_number(prefix: str, year: int = None) -> str:
    """``{prefix}-{year}-{4 random digits}``, e.g. ``F-2025-4821``."""
    year = year or date.today().year
    return f"{prefix}-{year}-{random.randint(1000, 9999)}"


def number_exists(model, number: str, exclude_id: int = None) -> bool:
    query = model.query.filter(model.number == number)
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    return query.first() is not None


def max_attempts() -> int:
    if has_app_context():
        return current_app.config.get('DOCUMENT_NUMBER_MAX_ATTEMPTS', DEFAULT_MAX_ATTEMPTS)
    return DEFAULT_MAX_ATTEMPTS


def assign_unique_number(model, requested: str, prefix: str, exclude_id: int = None,
                         attempts: int = None) -> str:
    """Return ``requested`` if no other ``model`` row uses it, else a fresh number.

    Collisions are regenerated with :func:`generate_number` until a free value
    is found or ``attempts`` checks have failed.
    """
    attempts = attempts or max_attempts()
    candidate = (requested or "").strip() or generate_number(prefix)

    for _ in range(attempts):
        if not number_exists(model, candidate, exclude_id):
            return candidate
        logger.info('Document number %s already used, regenerating', candidate)
        candidate = generate_number(prefix)

    logger.error('No free %s number after %d attempts', prefix, attempts)
    raise DocumentNumberConflict()
