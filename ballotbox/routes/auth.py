from flask import current_app, request
from werkzeug.security import check_password_hash

from ballotbox.models import User
from ballotbox.services.security import generate_api_token


def register_auth_routes(app):
    @app.route("/api/v1/auth/login", methods=["POST"])
    def api_login():
        data = request.get_json(silent=True) or {}
        username = (data.get("username") or "").strip()
        password = data.get("password") or ""

        user = User.query.filter_by(username=username).first()
        if not user or not check_password_hash(user.password_hash, password):
            current_app.logger.warning("Failed API login for username: %s", username)
            return {"error": "Invalid username or password", "code": "invalid_credentials"}, 401

        return {"token": generate_api_token(user), "user_id": user.id}
