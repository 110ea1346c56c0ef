from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from ballotbox.extensions import db
from ballotbox.models import User


def _token_serializer():
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"])


def generate_api_token(user):
    return _token_serializer().dumps(
        {"user_id": user.id, "email": user.email}, salt="api-token"
    )


def verify_api_token(token, max_age=None):
    if max_age is None:
        max_age = current_app.config["API_TOKEN_MAX_AGE"]
    try:
        return _token_serializer().loads(token, salt="api-token", max_age=max_age)
    except (BadSignature, SignatureExpired):
        return None


def load_user_from_request(request):
    """Flask-Login request loader for ``Authorization: Bearer <token>``."""
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None

    claims = verify_api_token(token.strip())
    if not claims or not isinstance(claims.get("user_id"), int):
        return None

    return db.session.get(User, claims["user_id"])
