from datetime import datetime, timezone
from typing import Any, Dict, Optional

from flask import abort, current_app, jsonify, request
from marshmallow import Schema, ValidationError as SchemaError

from storefront.clients.backend_client import BackendClient
from storefront.core.dependencies import DependencyContainer
from storefront.core.exceptions import ValidationError
from storefront.models.user import UserProfile
from storefront.services.session import SessionRegistry, StorefrontSession

SESSION_HEADER = "X-Session-Id"
MAX_SESSION_KEY_LENGTH = 128


def success_response(data, message: Optional[str] = None, status: int = 200):
    """Consistent success response envelope."""
    response = {
        "success": True,
        "data": data,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if message:
        response["message"] = message
    return jsonify(response), status


def get_container() -> DependencyContainer:
    return current_app.extensions["storefront"]


def load_json(schema: Schema) -> Dict[str, Any]:
    """Validate the JSON request body with a marshmallow schema."""
    if not request.is_json:
        abort(400, "Content-Type must be application/json.")

    try:
        return schema.load(request.get_json(force=True) or {})
    except SchemaError as err:
        field_errors = [
            {"field": field, "message": "; ".join(messages) if isinstance(messages, list) else str(messages)}
            for field, messages in err.messages.items()
        ]
        raise ValidationError("Invalid request body", field_errors=field_errors)


def get_session_key() -> str:
    """Extract and validate the shopper's session key from the X-Session-Id header."""
    key = (request.headers.get(SESSION_HEADER) or "").strip()
    if not key:
        abort(400, f"Missing {SESSION_HEADER} header.")
    if len(key) > MAX_SESSION_KEY_LENGTH:
        abort(400, f"Invalid {SESSION_HEADER} header: too long.")
    return key


def get_bearer_token() -> Optional[str]:
    auth = request.headers.get("Authorization", "")
    if auth.lower().startswith("bearer "):
        token = auth[7:].strip()
        return token or None
    return None


def get_current_user() -> UserProfile:
    """Profile of the signed-in shopper, or an anonymous profile."""
    token = get_bearer_token()
    if not token:
        return UserProfile.anonymous()
    return get_container().get(BackendClient).get_profile(token)


def get_session() -> StorefrontSession:
    registry = get_container().get(SessionRegistry)
    return registry.get(get_session_key(), get_current_user())
