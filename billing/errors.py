"""Error taxonomy and the JSON error handlers bound in the app factory.

Controllers raise one of the ``ApiError`` subclasses below and let the
handlers turn it into the ``{success, message, ...}`` envelope.
"""
import logging
import traceback

from flask import current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from billing.extensions import db

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code = 500
    message = 'Erreur serveur interne'

    def __init__(self, message=None, **payload):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.payload = payload

    def to_dict(self):
        body = {'success': False, 'message': self.message}
        body.update(self.payload)
        return body


class ValidationError(ApiError):
    status_code = 400
    message = 'Données invalides'

    @classmethod
    def missing(cls, fields):
        return cls(f"Champs manquants: {', '.join(fields)}", missingFields=list(fields))


class NotFoundError(ApiError):
    status_code = 404
    message = 'Ressource non trouvée'


class ConflictError(ApiError):
    status_code = 400
    message = 'Cette valeur existe déjà'


class DocumentNumberConflict(ConflictError):
    message = 'Impossible de générer un numéro de document unique'


class AuthenticationError(ApiError):
    status_code = 401
    message = 'Authentification requise'


class PermissionDenied(ApiError):
    status_code = 403
    message = 'Permissions insuffisantes'


class PdfGenerationError(ApiError):
    status_code = 500
    message = 'Erreur lors de la génération du PDF'


def api_response(data=None, message=None, status=200):
    body = {'success': True}
    if message:
        body['message'] = message
    if data is not None:
        body['data'] = data
    return jsonify(body), status


def _with_debug(body, error):
    if current_app.debug:
        body['traceback'] = ''.join(traceback.format_exception(type(error), error, error.__traceback__))
    return body


def register_error_handlers(app):

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        if error.status_code >= 500:
            logger.error('%s: %s', type(error).__name__, error.message, exc_info=error)
        return jsonify(_with_debug(error.to_dict(), error)), error.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        db.session.rollback()
        logger.exception('Database error')
        body = {'success': False, 'message': 'Erreur de base de données'}
        return jsonify(_with_debug(body, error)), 500

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        message = 'Route non trouvée' if error.code == 404 else error.description
        return jsonify({'success': False, 'message': message}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        logger.exception('Unhandled error')
        body = {'success': False, 'message': ApiError.message}
        return jsonify(_with_debug(body, error)), 500
