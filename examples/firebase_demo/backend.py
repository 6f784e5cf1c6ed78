"""
Minimal Flask API protected by Firebase ID tokens.

Configuration comes from the environment or a ``.env`` file:

    FIREBASE_AUTH_PROJECT_ID=my-project
    FIREBASE_AUTH_ADMIN_PROJECT_ID=my-admin-project   # optional second profile

Run with ``flask --app examples.firebase_demo.backend run`` and call it with
``Authorization: Bearer <idToken>`` from a Firebase client SDK.
"""

import logging
import os

from dotenv import load_dotenv
from flask import Flask, g, jsonify

from firebase_token_verification import (
    FirebaseAuth,
    GoogleKeySetLoader,
    InMemoryKeyStore,
    KeyRefreshError,
    Profile,
)

load_dotenv()
logging.basicConfig(level=logging.INFO)

key_store = InMemoryKeyStore()
key_loader = GoogleKeySetLoader()

# auth will be the ext imported in the Flask app
auth = FirebaseAuth()


def create_app() -> Flask:
    """
    Create the Flask application and load Google's signing keys once.

    Returns:
        Flask: Configured Flask application instance
    """
    app = Flask(__name__)
    app.config.from_mapping(
        {k: v for k, v in os.environ.items() if k.startswith("FIREBASE_AUTH_")}
    )
    app.config["FIREBASE_AUTH_KEY_STORE"] = key_store
    auth.init_app(app)

    try:
        key_loader.refresh(key_store)
    except KeyRefreshError:
        app.logger.exception("Could not load Firebase signing keys; every token will be rejected")

    @app.get("/api/me")
    @auth.require()
    def me():
        return jsonify({"uid": g.firebase_uid, "email": g.firebase_claims.get("email")}), 200

    @app.get("/api/admin")
    @auth.require(issuer=Profile("admin"))
    def admin():
        return jsonify({"uid": g.firebase_uid, "admin": True}), 200

    @app.errorhandler(401)
    def unauthorized(error):
        return jsonify(
            {
                "status": "denied",
                "message": error.description,
                "authenticated": False,
            }
        ), 401

    return app
