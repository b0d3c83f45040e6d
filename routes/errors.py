from flask import jsonify
from sqlalchemy.exc import DisconnectionError, OperationalError

from logging_config import setup_logging
from schemas import error_list, first_error

logger = setup_logging()

# raised by SQLAlchemy when the store cannot be reached
DB_UNAVAILABLE_ERRORS = (OperationalError, DisconnectionError)

SERVICE_UNAVAILABLE = "Service temporarily unavailable. Please try again later."


def invalid_payload(exc):
    return jsonify({'message': first_error(exc.messages), 'errors': error_list(exc)}), 400


def service_unavailable(action, exc):
    logger.error("Database unavailable during %s: %s", action, exc)
    return jsonify({'message': SERVICE_UNAVAILABLE}), 503
