"""Tests for the app factory."""

import os
import unittest
from unittest.mock import patch

from beytracker import create_app
from tests.conftest import FirestoreAppTestCase


class AppFirebaseTestCase(FirestoreAppTestCase):
    """Test case for the app factory and shared error handling."""

    def test_404_error_handler(self):
        """Test the custom 404 error handler."""
        response = self.client.get("/non_existent_page")
        self.assertEqual(response.status_code, 404)
        self.assertIn(b"Not found", response.data)

    def test_404_json(self):
        """Unknown API paths answer with JSON."""
        response = self.client.get(
            "/logs/t1/api/unknown", headers={"Accept": "application/json"}
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json(), {"error": "Not found"})

    def test_index_anonymous(self):
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertIn(b"Sign in", response.data)

    def test_index_signed_in(self):
        self._set_session_user()
        response = self.client.get("/")
        self.assertEqual(response.status_code, 302)
        self.assertTrue(response.location.endswith("/tournaments/"))

    def test_pages_require_login(self):
        """Pages redirect to the root; APIs answer 401."""
        response = self.client.get("/tournaments/")
        self.assertEqual(response.status_code, 302)
        self.assertTrue(response.location.endswith("/"))

        response = self.client.get("/logs/t1/api/feed")
        self.assertEqual(response.status_code, 401)

    def test_admin_api_requires_admin(self):
        self._set_session_user()
        response = self.client.post("/logs/t1/api/stadiums/count", json={"count": 2})
        self.assertEqual(response.status_code, 403)


class AppConfigTestCase(unittest.TestCase):
    """Test case for configuration loading."""

    def test_refresh_settings_from_environment(self):
        env_vars = {"AUTO_REFRESH_SECONDS": "2.5", "LIVE_FEED_LIMIT": "20"}
        with patch.dict(os.environ, env_vars):
            app = create_app({"TESTING": True})
        self.assertEqual(app.config["AUTO_REFRESH_SECONDS"], 2.5)
        self.assertEqual(app.config["LIVE_FEED_LIMIT"], 20)

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            app = create_app({"TESTING": True})
        self.assertEqual(app.config["AUTO_REFRESH_SECONDS"], 10)
        self.assertEqual(app.config["LIVE_FEED_LIMIT"], 50)

    def test_https_scheme_with_proxy_headers(self):
        """Test that X-Forwarded-Proto header is respected."""
        app = create_app({"TESTING": True})

        @app.route("/test_scheme")
        def test_scheme():
            from flask import request

            return request.scheme

        response = app.test_client().get(
            "/test_scheme", headers={"X-Forwarded-Proto": "https"}
        )
        self.assertEqual(response.data.decode(), "https")


if __name__ == "__main__":
    unittest.main()
