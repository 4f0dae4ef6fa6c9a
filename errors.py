import logging
from functools import wraps

from flask import jsonify

from extensions import db

logger = logging.getLogger(__name__)


class WhiteboardError(Exception):
    """Base error carrying the HTTP status it should be reported with."""

    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFound(WhiteboardError):
    status_code = 404


class Forbidden(WhiteboardError):
    status_code = 403


class ValidationError(WhiteboardError):
    status_code = 400


class RoomIdExhausted(WhiteboardError):
    status_code = 500


def api_action(action):
    """Map unexpected failures in a view to a generic 500 naming the action.

    Errors derived from WhiteboardError pass through to the app error handler.
    Anything else is logged, the session is rolled back and the client only
    sees {"error": "Failed to <action>"}.
    """
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except WhiteboardError:
                db.session.rollback()
                raise
            except Exception:
                logger.exception(f"Failed to {action}")
                db.session.rollback()
                return jsonify({"error": f"Failed to {action}"}), 500
        return wrapper
    return decorator


def register_error_handlers(app):
    @app.errorhandler(WhiteboardError)
    def handle_whiteboard_error(error):
        return jsonify({"error": error.message}), error.status_code

    @app.errorhandler(404)
    def handle_not_found(error):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return jsonify({"error": "Method not allowed"}), 405
