"""Flask application entry point."""

import logging
from dataclasses import dataclass

from flask import Flask, g, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from .auth.api import auth_bp, invitations_bp, members_bp
from .auth.context import resolve_context
from .auth.mail import LogMailer, Mailer
from .auth.passwords import PasswordHasher
from .auth.service import AccountService
from .auth.store import MemberStore, SqliteMemberStore
from .auth.token import TokenService
from .config import Settings, get_settings
from .db import init_db
from .exceptions import CampError

logger = logging.getLogger(__name__)


@dataclass
class CampServices:
    """Collaborators built once at startup and shared by every request."""

    settings: Settings
    store: MemberStore
    tokens: TokenService
    hasher: PasswordHasher
    accounts: AccountService


def _error_response(error_type: str, code: str, message: str, details: dict | None, status: int):
    response = {
        "error": {
            "type": error_type,
            "code": code,
            "message": message
        }
    }
    if details:
        response["error"]["details"] = details
    return jsonify(response), status


def register_error_handlers(app: Flask) -> None:
    """Map exceptions to JSON error envelopes."""

    @app.errorhandler(CampError)
    def handle_camp_error(error):
        """Handle every CampError with its own code and status."""
        if error.status_code >= 500:
            logger.error(f"{error.__class__.__name__}: {error.message}")
        return _error_response(
            error.__class__.__name__,
            error.code,
            error.message,
            error.details,
            error.status_code
        )

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        """Handle routing errors (unknown path, wrong method)."""
        return _error_response(
            error.__class__.__name__,
            error.name.upper().replace(" ", "_"),
            error.description,
            None,
            error.code
        )

    @app.errorhandler(Exception)
    def handle_internal_error(error):
        """Handle anything unexpected without leaking internals."""
        logger.exception(f"Internal error: {error}")
        return _error_response(
            "InternalServerError",
            "INTERNAL_SERVER_ERROR",
            "An internal error occurred",
            None,
            500
        )


def create_app(
    settings: Settings | None = None,
    *,
    store: MemberStore | None = None,
    mailer: Mailer | None = None,
) -> Flask:
    """Build the Flask application.

    Args:
        settings: Configuration; read from the environment when omitted
        store: Credential store; SQLite at settings.database_path when omitted
        mailer: Outbound mail; LogMailer when omitted

    Raises:
        pydantic.ValidationError: If settings are read from the environment
            and JWT_SECRET_KEY is missing
    """
    if settings is None:
        settings = get_settings()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    app = Flask(__name__)

    # CORS configuration
    CORS(app, origins=settings.cors_origins, supports_credentials=True)

    if store is None:
        try:
            init_db(settings.database_path)
            logger.info("Database initialized successfully")
        except Exception as e:
            logger.error(f"Database initialization failed: {e}")
            raise
        store = SqliteMemberStore(settings.database_path)

    tokens = TokenService.from_settings(settings)
    hasher = PasswordHasher.from_settings(settings)
    accounts = AccountService(
        store,
        tokens,
        hasher,
        mailer=mailer or LogMailer(),
        bulk_invite_limit=settings.bulk_invite_limit,
    )
    app.extensions["camp"] = CampServices(
        settings=settings,
        store=store,
        tokens=tokens,
        hasher=hasher,
        accounts=accounts,
    )

    @app.before_request
    def load_request_context():
        """Resolve the caller's identity once, before any guard runs."""
        g.ctx = resolve_context(
            request.headers.get("Authorization"),
            request.remote_addr,
            tokens,
            store,
        )

    register_error_handlers(app)

    # Health check endpoint
    @app.route("/health")
    def health():
        """Health check endpoint."""
        return jsonify({"status": "ok"})

    app.register_blueprint(auth_bp)
    app.register_blueprint(invitations_bp)
    app.register_blueprint(members_bp)

    return app


if __name__ == "__main__":
    # Threaded server: each request gets its own worker thread
    create_app().run(debug=True, threaded=True)
