from flask import Blueprint, jsonify, request
from marshmallow import ValidationError

from logging_config import setup_logging
from models import NewsSuggestion, db
from routes.errors import DB_UNAVAILABLE_ERRORS, invalid_payload, service_unavailable
from schemas import news_suggestion_schema

news_bp = Blueprint("news_api", __name__)

logger = setup_logging()


@news_bp.route("/api/news-suggest", methods=["POST"])
def suggest_news():
    try:
        payload = news_suggestion_schema.load(request.get_json(silent=True) or {})
    except ValidationError as exc:
        logger.warning("News suggestion rejected: %s", exc.messages)
        return invalid_payload(exc)

    try:
        # blank optional fields are stored as NULL
        suggestion = NewsSuggestion(
            name=payload.get("name") or None,
            email=payload.get("email") or None,
            title=payload["title"],
            text=payload["text"],
            link=payload.get("link") or None,
        )
        db.session.add(suggestion)
        db.session.commit()
    except DB_UNAVAILABLE_ERRORS as exc:
        db.session.rollback()
        return service_unavailable("news suggestion", exc)
    except Exception:
        db.session.rollback()
        logger.exception("Error while saving news suggestion")
        return jsonify({"message": "Failed to submit news suggestion"}), 500

    logger.info("News suggestion %s stored.", suggestion.id)
    return jsonify({"message": "Thank you! Your news has been sent for review."})
