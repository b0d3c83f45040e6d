import re
from typing import Any, Dict

from marshmallow import EXCLUDE, Schema, ValidationError, fields, pre_load, validates, validate

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[0-9\s\-\+\(\)]+$")
MIN_PASSWORD_LENGTH = 6
MAX_QUANTITY = 10
# ten units must still fit a Numeric(10, 2) total
MAX_PRICE = 9_999_999.99


def required_str(message: str, **kwargs) -> fields.Str:
    return fields.Str(
        required=True,
        validate=validate.Length(min=1, error=message),
        error_messages={"required": message, "null": message},
        **kwargs,
    )


def optional_str(**kwargs) -> fields.Str:
    return fields.Str(load_default=None, allow_none=True, **kwargs)


def first_error(messages) -> str:
    """Return the first human readable message from a marshmallow error dict."""
    if isinstance(messages, dict):
        for value in messages.values():
            return first_error(value)
    if isinstance(messages, list) and messages:
        return first_error(messages[0])
    return str(messages)


def error_list(exc: ValidationError):
    errors = []
    for field, messages in (exc.messages or {}).items():
        for message in messages:
            errors.append({"field": field, "msg": message})
    return errors


class BaseSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    strip_keys = ()
    lower_keys = ()

    @pre_load
    def normalise_strings(self, data: Dict[str, Any], **kwargs):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in self.strip_keys + self.lower_keys:
            value = data.get(key)
            if isinstance(value, str):
                data[key] = value.strip()
        for key in self.lower_keys:
            value = data.get(key)
            if isinstance(value, str):
                data[key] = value.lower()
        return data


class RegisterSchema(BaseSchema):
    name = required_str("All fields are required")
    email = required_str("All fields are required")
    password = required_str("All fields are required")

    strip_keys = ("name",)
    lower_keys = ("email",)

    @validates("email")
    def validate_email(self, value: str, **kwargs):
        if not EMAIL_PATTERN.match(value):
            raise ValidationError("Invalid email address")

    @validates("password")
    def validate_password(self, value: str, **kwargs):
        if len(value) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


class LoginSchema(BaseSchema):
    email = required_str("Email and password are required")
    password = required_str("Email and password are required")

    lower_keys = ("email",)


class NewsSuggestionSchema(BaseSchema):
    name = optional_str()
    email = optional_str()
    title = required_str("Title and text are required")
    text = required_str("Title and text are required")
    link = optional_str()

    strip_keys = ("name", "email", "title", "text", "link")


class OrderSchema(BaseSchema):
    movie_name = required_str("All fields are required", data_key="movieName")
    movie_price = fields.Float(
        required=True,
        data_key="moviePrice",
        validate=validate.Range(min=0, min_inclusive=False, max=MAX_PRICE, error="Invalid price"),
        error_messages={
            "required": "All fields are required",
            "null": "All fields are required",
            "invalid": "Invalid price",
            "special": "Invalid price",
        },
    )
    quantity = fields.Int(
        required=True,
        validate=validate.Range(min=1, max=MAX_QUANTITY, error=f"Quantity must be between 1 and {MAX_QUANTITY}"),
        error_messages={
            "required": "All fields are required",
            "null": "All fields are required",
            "invalid": f"Quantity must be between 1 and {MAX_QUANTITY}",
        },
    )
    customer_name = required_str("All fields are required", data_key="customerName")
    customer_email = required_str("All fields are required", data_key="customerEmail")
    customer_phone = required_str("All fields are required", data_key="customerPhone")
    delivery_address = required_str("All fields are required", data_key="deliveryAddress")
    payment_method = required_str("All fields are required", data_key="paymentMethod")

    strip_keys = ("movieName", "customerName", "customerPhone", "deliveryAddress", "paymentMethod")
    lower_keys = ("customerEmail",)

    @validates("customer_email")
    def validate_customer_email(self, value: str, **kwargs):
        if not EMAIL_PATTERN.match(value):
            raise ValidationError("Invalid email address")

    @validates("customer_phone")
    def validate_customer_phone(self, value: str, **kwargs):
        digits = re.sub(r"[^0-9]", "", value)
        if not PHONE_PATTERN.match(value) or len(digits) < 10:
            raise ValidationError("Invalid phone number")


register_schema = RegisterSchema()
login_schema = LoginSchema()
news_suggestion_schema = NewsSuggestionSchema()
order_schema = OrderSchema()
