from decimal import Decimal

from flask import Blueprint, jsonify, request
from marshmallow import ValidationError

from logging_config import setup_logging
from models import Order, db
from routes.errors import DB_UNAVAILABLE_ERRORS, invalid_payload, service_unavailable
from schemas import order_schema

order_bp = Blueprint("order_api", __name__)

logger = setup_logging()


def compute_total(price, quantity):
    """Price times quantity, rounded to cents with ``round``."""
    return round(price * quantity, 2)


@order_bp.route("/api/order", methods=["POST"])
def post_order():
    try:
        payload = order_schema.load(request.get_json(silent=True) or {})
    except ValidationError as exc:
        logger.warning("Order rejected: %s", exc.messages)
        return invalid_payload(exc)

    try:
        # any client supplied total was dropped by the schema
        quantity = payload["quantity"]
        total_price = compute_total(payload["movie_price"], quantity)

        order = Order(
            movie_name=payload["movie_name"],
            movie_price=Decimal(str(payload["movie_price"])),
            quantity=quantity,
            total_price=Decimal(str(total_price)),
            customer_name=payload["customer_name"],
            customer_email=payload["customer_email"],
            customer_phone=payload["customer_phone"],
            delivery_address=payload["delivery_address"],
            payment_method=payload["payment_method"],
        )
        db.session.add(order)
        db.session.commit()
    except DB_UNAVAILABLE_ERRORS as exc:
        db.session.rollback()
        return service_unavailable("order", exc)
    except Exception:
        db.session.rollback()
        logger.exception("Error while saving order")
        return jsonify({"message": "Failed to place order"}), 500

    logger.info("Order %s placed for %s (total %s).", order.id, order.customer_email, total_price)
    return jsonify(
        {
            "message": "Order placed successfully! We will contact you shortly.",
            "orderId": order.id,
            "totalPrice": total_price,
        }
    )
