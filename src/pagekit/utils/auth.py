"""Session helpers for the tenant login endpoint."""

from dataclasses import dataclass, field
from typing import Any

import structlog

from pagekit.client import ApiClient
from pagekit.utils.exceptions import PageKitError, UnauthorizedError

logger = structlog.get_logger()

LOGIN_PATH = "/tenant/login"
LOGOUT_PATH = "/tenant/logout"


@dataclass
class AuthSession:
    """Authenticated session returned by the login endpoint."""

    token: str
    refresh_token: str | None = None
    user: dict[str, Any] = field(default_factory=dict)
    tenant_id: str | None = None


def _session_from_response(body: Any) -> AuthSession | None:
    """Extract the session from the response shapes the backend has used."""
    if not isinstance(body, dict):
        return None

    data = body.get("data") if isinstance(body.get("data"), dict) else body
    token = data.get("token") or data.get("access_token") or body.get("access_token")
    if not token:
        return None

    user = data.get("user") if isinstance(data.get("user"), dict) else {}
    tenant_id = user.get("tenantId") or user.get("tenant_id") or data.get("tenant_id")
    refresh_token = data.get("refreshToken") or data.get("refresh_token")

    return AuthSession(
        token=str(token),
        refresh_token=refresh_token,
        user=user,
        tenant_id=str(tenant_id) if tenant_id else None,
    )


def login(
    client: ApiClient,
    username: str,
    password: str,
    email: str | None = None,
) -> AuthSession:
    """Log in and install the token on the client.

    Args:
        client: API client.
        username: Username (or email).
        password: Password.
        email: Optional email, sent alongside the username.

    Returns:
        The authenticated session.

    Raises:
        UnauthorizedError: If the response carries no token.
        ApiError: If the backend rejects the credentials.
    """
    credentials: dict[str, Any] = {"username": username, "password": password}
    if email:
        credentials["email"] = email

    body = client.post(LOGIN_PATH, json=credentials)
    session = _session_from_response(body)
    if session is None:
        message = body.get("message") if isinstance(body, dict) else None
        raise UnauthorizedError(message or "Login failed", body)

    client.set_token(session.token)
    logger.info("Logged in", username=username, tenant_id=session.tenant_id)
    return session


def logout(client: ApiClient) -> None:
    """Log out. The local token is cleared even if the server call fails."""
    try:
        client.post(LOGOUT_PATH)
    except PageKitError as e:
        logger.warning("Logout request failed", error=str(e))
        raise
    finally:
        client.set_token(None)
