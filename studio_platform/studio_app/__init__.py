"""studio_app package – application factory and blueprint registration."""

from __future__ import annotations

import json
import os
from time import perf_counter

import click
from flask import Flask, g, request
from flask_jwt_extended import JWTManager
from sqlalchemy import event, inspect
from sqlalchemy.exc import SQLAlchemyError

from config import resolve_config
from .blueprints import BLUEPRINTS
from .extensions import cors, db, jwt, migrate, limiter
from .logging_config import configure_logging, assign_request_id
from .metrics import record_request
from .utils import hash_password


def create_app(config_name: str | None = None) -> Flask:
    """Application factory used by both CLI and runtime servers."""

    app = Flask(__name__)
    _configure_app(app, config_name)
    configure_logging(app)
    _register_extensions(app)
    _register_blueprints(app)
    _register_shellcontext(app)
    _register_cli(app)
    _register_bootstrap(app)
    _register_request_hooks(app)

    return app


def _configure_app(app: Flask, config_name: str | None) -> None:
    env_name = config_name or os.getenv("FLASK_CONFIG")
    config_obj = resolve_config(env_name)
    app.config.from_object(config_obj)


def _register_extensions(app: Flask) -> None:
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    _configure_jwt(jwt)
    _configure_sqlite_engine(app)
    cors.init_app(
        app,
        resources={r"/api/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
    )
    limiter.default_limits = app.config.get("RATE_LIMIT_DEFAULTS", [])
    limiter.init_app(app)


def _register_blueprints(app: Flask) -> None:
    for blueprint, prefix in BLUEPRINTS:
        app.register_blueprint(blueprint, url_prefix=prefix)


def _register_shellcontext(app: Flask) -> None:
    # Lazy import inside function to avoid circular dependencies.
    from . import models

    @app.shell_context_processor
    def shell_context():
        return {
            "db": db,
            "User": models.User,
            "Producer": models.Producer,
            "SongRequest": models.SongRequest,
        }


def _configure_jwt(jwt_manager: JWTManager) -> None:
    from flask import jsonify

    from .models import User

    @jwt_manager.user_lookup_loader
    def user_lookup_callback(_jwt_header, jwt_data):
        identity = jwt_data.get("sub")
        if identity is None:
            return None
        try:
            identity_int = int(identity)
        except (TypeError, ValueError):
            return None
        return db.session.get(User, identity_int)

    @jwt_manager.user_lookup_error_loader
    def user_lookup_error_callback(_jwt_header, _jwt_data):
        return jsonify({"message": "User not found"}), 401

    @jwt_manager.expired_token_loader
    def expired_token_callback(jwt_header, jwt_data):
        return jsonify({"message": "Token has expired"}), 401

    @jwt_manager.invalid_token_loader
    def invalid_token_callback(error_string):
        return jsonify({"message": "Invalid token", "error": error_string}), 401

    @jwt_manager.unauthorized_loader
    def missing_token_callback(error_string):
        return jsonify({"message": "Missing authorization token"}), 401


def _register_bootstrap(app: Flask) -> None:
    @app.before_request
    def ensure_schema():
        if app.config.get("_SCHEMA_READY"):
            return
        try:
            _ensure_schema(app)
            _ensure_default_admin(app)
        except SQLAlchemyError as exc:
            app.logger.warning("Schema bootstrap skipped: %s", exc)
            return
        app.config["_SCHEMA_READY"] = True


def _register_request_hooks(app: Flask) -> None:
    @app.before_request
    def start_request():
        assign_request_id()
        g.request_started_at = perf_counter()

    @app.after_request
    def finalize(response):
        request_id = getattr(g, "request_id", None)
        if request_id:
            response.headers["X-Request-ID"] = request_id
        started = getattr(g, "request_started_at", None)
        latency = perf_counter() - started if started else 0.0
        endpoint = request.endpoint or request.path
        record_request(request.method, endpoint, response.status_code, latency)
        return response


def _configure_sqlite_engine(app: Flask) -> None:
    uri = app.config.get("SQLALCHEMY_DATABASE_URI", "")
    if not uri.startswith("sqlite") or ":memory:" in uri:
        return
    busy_timeout_ms = int(app.config.get("SQLITE_BUSY_TIMEOUT_MS", 15000))

    with app.app_context():
        engine = db.engine

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragmas(dbapi_connection, connection_record):  # pragma: no cover
            cursor = dbapi_connection.cursor()
            try:
                cursor.execute("PRAGMA journal_mode=WAL;")
                cursor.execute(f"PRAGMA busy_timeout={busy_timeout_ms};")
                cursor.execute("PRAGMA synchronous=NORMAL;")
            finally:
                cursor.close()


def _ensure_schema(app: Flask) -> None:
    # Migrations own the schema outside local SQLite development.
    if not app.config.get("AUTO_CREATE_SCHEMA", True):
        return
    with app.app_context():
        db.create_all()


def _ensure_default_admin(app: Flask) -> None:
    from .models import User

    if app.testing:
        return
    with app.app_context():
        if not inspect(db.engine).has_table("users"):
            return
        if User.query.filter_by(role="admin").first():
            return
        admin = User(
            email=app.config["ADMIN_DEFAULT_EMAIL"].lower(),
            display_name="Studio Admin",
            password_hash=hash_password(app.config["ADMIN_DEFAULT_PASSWORD"]),
            role="admin",
        )
        db.session.add(admin)
        db.session.commit()


def _register_cli(app: Flask) -> None:
    @app.cli.command("sweep-expired")
    def sweep_expired_command() -> None:
        """Refund expired orders in EXPIRY_SWEEP_STATUSES that no producer accepted."""

        from .tasks.expiry_tasks import sweep_expired_requests

        with app.app_context():
            result = sweep_expired_requests()
        click.echo(json.dumps(result, default=str))
        if result["errors"]:
            raise click.ClickException(f"{len(result['errors'])} order(s) failed to refund.")

    @app.cli.command("seed-admin")
    @click.option("--email", default=None, help="Admin email (defaults to ADMIN_DEFAULT_EMAIL).")
    @click.option("--password", default=None, help="Admin password.")
    def seed_admin(email: str | None, password: str | None) -> None:
        """Create an admin account for local testing."""

        from .models import User

        email = (email or app.config["ADMIN_DEFAULT_EMAIL"]).lower()
        password = password or app.config["ADMIN_DEFAULT_PASSWORD"]
        with app.app_context():
            _ensure_schema(app)
            if User.query.filter_by(email=email).first():
                click.echo("Admin already exists; nothing to do.")
                return
            db.session.add(
                User(
                    email=email,
                    display_name="Studio Admin",
                    password_hash=hash_password(password),
                    role="admin",
                )
            )
            db.session.commit()
            click.echo(f"Seeded admin: {email}")
