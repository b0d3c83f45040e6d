import bcrypt
from flask import Blueprint, current_app, jsonify, request
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError

from logging_config import setup_logging
from models import db, User
from routes.errors import DB_UNAVAILABLE_ERRORS, invalid_payload, service_unavailable
from schemas import login_schema, register_schema

auth_bp = Blueprint("auth", __name__)

logger = setup_logging()

INVALID_CREDENTIALS = "Invalid email or password"


def hash_password(password):
    pepper = current_app.config["PEPPER"].encode('utf-8')
    salt = bcrypt.gensalt(rounds=current_app.config["BCRYPT_ROUNDS"])
    password_with_pepper = password.encode('utf-8') + pepper
    return bcrypt.hashpw(password_with_pepper, salt).decode('utf-8')


def verify_password(entered_password, stored_hash):
    pepper = current_app.config["PEPPER"].encode('utf-8')
    entered_password_with_pepper = entered_password.encode('utf-8') + pepper
    try:
        return bcrypt.checkpw(entered_password_with_pepper, stored_hash.encode('utf-8'))
    except ValueError:
        # stored value is not a bcrypt hash
        return False


@auth_bp.route("/api/register", methods=["POST"])
def register():
    try:
        payload = register_schema.load(request.get_json(silent=True) or {})
    except ValidationError as exc:
        logger.warning("Registration rejected: %s", exc.messages)
        return invalid_payload(exc)

    name = payload["name"]
    email = payload["email"]

    try:
        if User.query.filter_by(email=email).first():
            logger.warning("Registration attempt with existing email: %s", email)
            return jsonify({'message': 'User already exists'}), 400

        new_user = User(name=name, email=email, password_hash=hash_password(payload["password"]))
        db.session.add(new_user)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        logger.warning("Concurrent registration for %s hit the unique constraint", email)
        return jsonify({'message': 'User already exists'}), 400
    except DB_UNAVAILABLE_ERRORS as exc:
        db.session.rollback()
        return service_unavailable("register", exc)
    except Exception:
        db.session.rollback()
        logger.exception("Error during registration")
        return jsonify({'message': 'Registration failed'}), 500

    logger.info("New user %s registered.", email)
    return jsonify({'message': 'Registration successful'})


@auth_bp.route("/api/login", methods=["POST"])
def login():
    try:
        payload = login_schema.load(request.get_json(silent=True) or {})
    except ValidationError as exc:
        logger.warning("Login rejected: %s", exc.messages)
        return invalid_payload(exc)

    email = payload["email"]

    try:
        user = User.query.filter_by(email=email).first()
    except DB_UNAVAILABLE_ERRORS as exc:
        db.session.rollback()
        return service_unavailable("login", exc)
    except Exception:
        db.session.rollback()
        logger.exception("Error during login")
        return jsonify({'message': 'Login failed'}), 500

    # same message for unknown user and bad password
    if not user or not verify_password(payload["password"], user.password_hash):
        logger.warning("Failed login attempt for %s", email)
        return jsonify({'message': INVALID_CREDENTIALS}), 400

    logger.info("User %s logged in.", email)
    return jsonify({
        'message': 'Login successful',
        'user': {'id': user.id, 'name': user.name, 'email': user.email},
    })


@auth_bp.route("/api/logout", methods=["POST"])
def logout():
    # the server keeps no session; this only acknowledges the client
    return jsonify({'message': 'Logged out'})
