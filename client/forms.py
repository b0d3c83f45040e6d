import logging
import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from client.config import ClientConfig
from client.errors import (
    GatewayError,
    InvalidCredentialsError,
    StorefrontError,
    UnexpectedError,
    ValidationError,
)
from client.fallback import Result, execute
from client.gateway import Gateway
from client.headlines import fetch_headlines
from client.notifications import Notification, Notifier
from client.storage import LocalPersistence, LocalStore, Session

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6
MIN_PHONE_DIGITS = 10
LOGOUT_TIMEOUT = 4.0
CURRENCY = "₽"


@dataclass
class Form:
    """Field values of one modal form plus whether its modal is showing."""

    values: Dict[str, Any] = field(default_factory=dict)
    is_open: bool = False

    def value(self, name: str) -> str:
        raw = self.values.get(name)
        return "" if raw is None else str(raw).strip()

    def raw(self, name: str) -> str:
        raw = self.values.get(name)
        return "" if raw is None else str(raw)

    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        self.is_open = False

    def reset(self) -> None:
        self.values = {}


@dataclass
class SubmitOutcome:
    ok: bool
    session: Optional[Session]
    notification: Optional[Notification]
    result: Optional[Result] = None


def parse_price(value: Any) -> str:
    """Strip currency symbols and separators, keeping digits and the dot."""
    return re.sub(r"[^0-9.]", "", "" if value is None else str(value))


def purchase_total(price: Any, quantity: Any) -> float:
    try:
        unit_price = float(parse_price(price))
    except ValueError:
        unit_price = 0.0
    try:
        count = int(str(quantity).strip())
    except ValueError:
        count = 1
    return round(unit_price * (count or 1), 2)


def format_price(amount: float) -> str:
    return f"{amount:.2f} {CURRENCY}"


def _timestamp_id() -> int:
    return int(time.time() * 1000)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class Storefront:
    """Form controllers for register, login, news suggestions and purchases.

    Each submit method validates the form, tries the API and falls back to
    the local store, then reports through the notifier. They never raise:
    the returned ``SubmitOutcome`` carries the new session and the
    notification that was shown.
    """

    def __init__(
        self,
        gateway: Gateway,
        persistence: LocalPersistence,
        notifier: Optional[Notifier] = None,
        news_api_key: Optional[str] = None,
    ):
        self.gateway = gateway
        self.persistence = persistence
        self.notifier = notifier or Notifier()
        self.news_api_key = news_api_key

    @classmethod
    def from_config(cls, config: Optional[ClientConfig] = None, notifier: Optional[Notifier] = None) -> "Storefront":
        config = config or ClientConfig.from_env()
        return cls(
            Gateway(config.api_base, timeout=config.timeout),
            LocalPersistence(LocalStore(config.store_path)),
            notifier=notifier,
            news_api_key=config.news_api_key,
        )

    def current_session(self) -> Optional[Session]:
        return self.persistence.get_session()

    def headlines(self):
        return fetch_headlines(self.news_api_key, session=self.gateway.session)

    # register

    def register(self, form: Form, session: Optional[Session] = None) -> SubmitOutcome:
        try:
            name = form.value("name")
            email = form.value("email").lower()
            password = form.raw("password")
            password_confirm = form.raw("passwordConfirm")

            if not (name and email and password and password_confirm):
                raise ValidationError("Please fill in all fields")
            if password != password_confirm:
                raise ValidationError("Passwords do not match")
            if len(password) < MIN_PASSWORD_LENGTH:
                raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

            result = execute(
                lambda: self.gateway.call(
                    "/api/register",
                    body={"name": name, "email": email, "password": password},
                    error_message="Registration failed",
                ),
                lambda: self._register_locally(name, email, password),
            )
            new_session = self.persistence.set_session(Session(name=name, email=email))
        except Exception as exc:
            return self._fail(session, exc)

        self._finish(form)
        return self._succeed("Registration successful! You are now signed in.", new_session, result)

    def _register_locally(self, name, email, password):
        self.persistence.append_user({"name": name, "email": email, "password": password})
        return {"message": "Registration saved locally"}

    # login

    def login(self, form: Form, session: Optional[Session] = None) -> SubmitOutcome:
        try:
            email = form.value("email").lower()
            password = form.raw("password")
            if not email or not password:
                raise ValidationError("Please fill in the fields")

            result = execute(
                lambda: self.gateway.call(
                    "/api/login",
                    body={"email": email, "password": password},
                    error_message="Invalid email or password",
                ),
                lambda: self._login_locally(email, password),
            )
            user = result.payload.get("user") or result.payload
            new_session = self.persistence.set_session(
                Session(name=user.get("name") or email, email=email)
            )
        except Exception as exc:
            return self._fail(session, exc)

        self._finish(form)
        return self._succeed("Signed in!", new_session, result)

    def _login_locally(self, email, password):
        found = self.persistence.find_user(email, password)
        if not found:
            raise InvalidCredentialsError()
        return {"user": {"name": found.get("name"), "email": found["email"]}}

    def logout(self, session: Optional[Session] = None) -> SubmitOutcome:
        try:
            try:
                self.gateway.call("/api/logout", timeout=LOGOUT_TIMEOUT)
            except GatewayError as exc:
                logger.info("Logout acknowledgement failed: %s", exc.message)
            self.persistence.clear_session()
        except Exception as exc:
            return self._fail(session, exc)
        return SubmitOutcome(ok=True, session=None, notification=None)

    # news suggestion

    def suggest_news(self, form: Form, session: Optional[Session] = None) -> SubmitOutcome:
        try:
            title = form.value("title")
            text = form.value("text")
            if not title or not text:
                raise ValidationError("Please fill in the title and the description")

            body = {
                "name": form.value("name") or None,
                "email": form.value("email") or None,
                "title": title,
                "text": text,
                "link": form.value("link") or None,
            }
            result = execute(
                lambda: self.gateway.call("/api/news-suggest", body=body, error_message="Submission failed"),
                lambda: self._suggest_locally(body),
            )
        except Exception as exc:
            return self._fail(session, exc)

        self._finish(form)
        return self._succeed("Thank you! Your news has been sent for review.", session, result)

    def _suggest_locally(self, body):
        record = dict(body, id=_timestamp_id(), created_at=_now())
        self.persistence.append_news_suggestion(record)
        return {"message": "News suggestion saved locally"}

    # purchase

    def open_purchase(self, form: Form, session: Optional[Session], movie: str, price: Any) -> Form:
        form.values.update({
            "movie": movie,
            "price": f"{parse_price(price) or '0'} {CURRENCY}",
            "quantity": 1,
        })
        if session:
            form.values["customerName"] = session.name or session.email
            form.values["customerEmail"] = session.email
        form.values["total"] = format_price(purchase_total(form.values["price"], 1))
        form.open()
        return form

    def purchase(self, form: Form, session: Optional[Session] = None) -> SubmitOutcome:
        try:
            order = self._validated_order(form)
            result = execute(
                lambda: self.gateway.call("/api/order", body=order, error_message="Order failed"),
                lambda: self._order_locally(order),
            )
        except Exception as exc:
            return self._fail(session, exc)

        self._finish(form)
        message = result.payload.get("message") or "Order placed successfully! We will contact you shortly."
        return self._succeed(message, session, result)

    def _validated_order(self, form: Form) -> Dict[str, Any]:
        movie_name = form.value("movie")
        movie_price = parse_price(form.value("price"))
        quantity = form.value("quantity")
        customer_name = form.value("customerName")
        customer_email = form.value("customerEmail").lower()
        customer_phone = form.value("customerPhone")
        delivery_address = form.value("deliveryAddress")
        payment_method = form.value("paymentMethod")

        if not all([movie_name, movie_price, quantity, customer_name, customer_email,
                    customer_phone, delivery_address, payment_method]):
            raise ValidationError("Please fill in all fields")
        if not EMAIL_PATTERN.match(customer_email):
            raise ValidationError("Invalid email address")
        if len(re.sub(r"[^0-9]", "", customer_phone)) < MIN_PHONE_DIGITS:
            raise ValidationError("Invalid phone number (at least 10 digits)")
        try:
            price = float(movie_price)
        except ValueError:
            raise ValidationError("Invalid price")
        try:
            count = int(quantity)
        except ValueError:
            raise ValidationError("Quantity must be a whole number")
        if count < 1:
            raise ValidationError("Quantity must be at least 1")

        return {
            "movieName": movie_name,
            "moviePrice": price,
            "quantity": count,
            "customerName": customer_name,
            "customerEmail": customer_email,
            "customerPhone": customer_phone,
            "deliveryAddress": delivery_address,
            "paymentMethod": payment_method,
        }

    def _order_locally(self, order):
        record = dict(
            order,
            id=_timestamp_id(),
            totalPrice=round(order["moviePrice"] * order["quantity"], 2),
            created_at=_now(),
        )
        self.persistence.append_order(record)
        return {"message": "Order saved locally", "orderId": record["id"]}

    # shared

    def _finish(self, form: Form) -> None:
        form.close()
        form.reset()

    def _succeed(self, message, session, result) -> SubmitOutcome:
        return SubmitOutcome(ok=True, session=session, notification=self.notifier.show(message), result=result)

    def _fail(self, session, exc) -> SubmitOutcome:
        if not isinstance(exc, StorefrontError):
            logger.exception("Unexpected error while submitting form")
            exc = UnexpectedError()
        return SubmitOutcome(ok=False, session=session, notification=self.notifier.error(exc.message))
