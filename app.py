import os
from datetime import datetime, timezone

from dotenv import load_dotenv
from flask import Flask, jsonify
from sqlalchemy import text

from logging_config import setup_logging
from models import db
from routes.auth_routes import auth_bp
from routes.errors import DB_UNAVAILABLE_ERRORS
from routes.news_routes import news_bp
from routes.order_routes import order_bp

load_dotenv()

logger = setup_logging()

DEFAULT_DATABASE_URL = "sqlite:///movieworld.db"


def _engine_options(database_url, pool_size):
    # SQLite uses its own pool classes; only size real server pools
    if database_url.startswith("sqlite"):
        return {}
    return {"pool_size": pool_size, "pool_pre_ping": True}


def create_app(test_config=None):
    app = Flask(__name__)

    app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config["SECRET_KEY"] = os.getenv("SECRET_KEY")
    app.config["PEPPER"] = os.getenv("PEPPER")
    app.config["BCRYPT_ROUNDS"] = int(os.getenv("BCRYPT_ROUNDS", "10"))
    app.config["DB_POOL_SIZE"] = int(os.getenv("DB_POOL_SIZE", "10"))

    if test_config:
        app.config.update(test_config)

    if app.config["PEPPER"] is None:
        raise RuntimeError("PEPPER environment variable is not set.")

    app.config.setdefault(
        "SQLALCHEMY_ENGINE_OPTIONS",
        _engine_options(app.config["SQLALCHEMY_DATABASE_URI"], app.config["DB_POOL_SIZE"]),
    )

    db.init_app(app)

    app.register_blueprint(auth_bp)
    app.register_blueprint(news_bp)
    app.register_blueprint(order_bp)

    @app.route("/api/health")
    def health():
        try:
            db.session.execute(text("SELECT 1"))
            db_status = "connected"
        except DB_UNAVAILABLE_ERRORS as exc:
            db.session.rollback()
            logger.warning("Health check could not reach the database: %s", exc)
            db_status = "disconnected"

        return jsonify({
            "status": "ok",
            "db": db_status,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    with app.app_context():
        try:
            db.create_all()
            logger.info("Database connection established")
        except DB_UNAVAILABLE_ERRORS as exc:
            # keep serving; clients fall back to their local store
            logger.error("Database unavailable at startup: %s", exc)

    return app


app = create_app()


if __name__ == '__main__':
    app.run(port=int(os.getenv("PORT", "3000")), debug=True)
