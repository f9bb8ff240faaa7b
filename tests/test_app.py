"""Tests for Flask application construction and configuration."""

from flask import Flask

from camp_core.auth.passwords import PasswordHasher
from camp_core.auth.service import AccountService
from camp_core.auth.token import TokenService
from camp_core.main import create_app


class TestCreateApp:
    """Tests for create_app()."""

    def test_returns_flask_app(self, app):
        assert isinstance(app, Flask)
        assert app.config["TESTING"] is True

    def test_services_built_from_settings(self, app, settings):
        services = app.extensions["camp"]

        assert services.settings is settings
        assert isinstance(services.tokens, TokenService)
        assert isinstance(services.hasher, PasswordHasher)
        assert isinstance(services.accounts, AccountService)
        assert services.hasher.rounds == settings.bcrypt_work_factor
        assert services.accounts.bulk_invite_limit == settings.bulk_invite_limit

    def test_custom_store(self, settings, store):
        app = create_app(settings, store=store)
        assert app.extensions["camp"].store is store

    def test_blueprints_registered(self, app):
        assert {"auth", "invitations", "members"} <= set(app.blueprints)

    def test_apps_do_not_share_secrets(self, settings, tmp_path):
        """Each app verifies only tokens signed with its own secret."""
        other_settings = settings.model_copy(update={
            "jwt_secret_key": "another-secret-key-0000",
            "database_path": str(tmp_path / "other.db"),
        })
        other = create_app(other_settings)

        token = other.extensions["camp"].tokens.sign_refresh("someone")
        app = create_app(settings)

        with app.test_client() as client:
            response = client.post("/auth/refresh", json={"refresh_token": token})
        assert response.status_code == 401


class TestHealth:
    """Tests for GET /health."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.get_json() == {"status": "ok"}


class TestCORSConfiguration:
    """Test CORS middleware configuration."""

    def test_cors_headers_for_allowed_origin(self, client):
        response = client.get("/health", headers={"Origin": "http://localhost:3000"})
        assert response.headers.get("Access-Control-Allow-Origin") == "http://localhost:3000"

    def test_cors_headers_absent_for_other_origin(self, client):
        response = client.get("/health", headers={"Origin": "http://evil.example.com"})
        assert "Access-Control-Allow-Origin" not in response.headers

    def test_cors_preflight(self, client):
        response = client.options("/auth/login", headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "POST",
        })
        assert response.status_code == 200
