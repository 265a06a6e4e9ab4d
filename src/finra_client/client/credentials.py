"""OAuth2 client-credentials login against the FINRA token endpoint.

``authenticate`` exchanges a client id and secret for a bearer token and
returns a long-lived ``httpx.AsyncClient`` with the ``Authorization`` header
already set, together with how long the token stays valid.
"""

import base64
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

import httpx

from ..exceptions import (
    AuthenticationError,
    AuthFailureReason,
    ClientConstructionError,
    InvalidHeaderError,
    TransportError,
)

logger = logging.getLogger("finra_client.credentials")

OAUTH2_ENDPOINT = "https://ews.fip.finra.org/fip/rest/ews/oauth2/access_token?grant_type=client_credentials"
HTTP_OK = 200

type ClientFactory = Callable[[], httpx.AsyncClient]


@dataclass(frozen=True, slots=True)
class LoginParameters:
    """Everything needed to (re)authenticate.

    ``client_factory`` builds a fresh, unauthenticated client each time it is
    called. Use it to configure proxies, timeouts or a mock transport.
    """

    client_factory: ClientFactory
    client_id: str
    client_secret: str

    def __repr__(self) -> str:
        return f"LoginParameters(client_id={self.client_id!r}, client_secret='***')"


def basic_auth_header(client_id: str, client_secret: str) -> str:
    """Return the ``Basic`` authorization value for the client credentials."""
    credentials = f"{client_id}:{client_secret}".encode()
    return "Basic " + base64.b64encode(credentials).decode("ascii")


def bearer_auth_header(token: str) -> str:
    """Return the ``Bearer`` authorization value for ``token``.

    Raises:
        InvalidHeaderError: If the token cannot be sent as a header value.

    """
    if not token.isascii() or any(ch in token for ch in "\r\n\0"):
        msg = "invalid headers: the access token contains characters not allowed in a header value"
        raise InvalidHeaderError(msg)
    return f"Bearer {token}"


def _build_client(login_parameters: LoginParameters) -> httpx.AsyncClient:
    try:
        return login_parameters.client_factory()
    except Exception as exc:
        msg = f"cannot construct the http client: {exc}"
        raise ClientConstructionError(msg) from exc


def _parse_login_response(payload: Any) -> tuple[str, timedelta]:
    """Extract the access token and its validity from the token endpoint JSON."""
    if not isinstance(payload, dict):
        raise AuthenticationError(
            "the login response is not a JSON object",
            reason=AuthFailureReason.INVALID_BODY,
        )

    expires_in = payload.get("expires_in")
    if expires_in is None:
        raise AuthenticationError(
            "the login response didn't contain the expiry of the token",
            reason=AuthFailureReason.MISSING_EXPIRY,
        )
    if not isinstance(expires_in, str):
        raise AuthenticationError(
            f"the token expiry is not a string in the login response: {expires_in!r}",
            reason=AuthFailureReason.INVALID_EXPIRY,
        )
    try:
        validity = timedelta(seconds=int(expires_in))
    except ValueError as exc:
        raise AuthenticationError(
            f"could not parse the token expiry as a number: {exc}",
            reason=AuthFailureReason.INVALID_EXPIRY,
        ) from exc

    token = payload.get("access_token")
    if token is None:
        raise AuthenticationError(
            "access_token not present in the login response",
            reason=AuthFailureReason.MISSING_TOKEN,
        )
    if not isinstance(token, str):
        raise AuthenticationError(
            "access_token is not a string in the login response",
            reason=AuthFailureReason.INVALID_TOKEN,
        )
    return token, validity


async def _request_token(login_parameters: LoginParameters) -> tuple[str, timedelta]:
    headers = {"Authorization": basic_auth_header(login_parameters.client_id, login_parameters.client_secret)}
    async with _build_client(login_parameters) as login_client:
        try:
            response = await login_client.post(OAUTH2_ENDPOINT, headers=headers)
        except httpx.HTTPError as exc:
            msg = f"http error while requesting an access token: {exc}"
            raise TransportError(msg) from exc

        if response.status_code != HTTP_OK:
            raise AuthenticationError(
                f"login attempt failed with status code {response.status_code}",
                reason=AuthFailureReason.STATUS,
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise AuthenticationError(
                f"the login response is not valid JSON: {exc}",
                reason=AuthFailureReason.INVALID_BODY,
                status_code=response.status_code,
            ) from exc

    return _parse_login_response(payload)


async def authenticate(login_parameters: LoginParameters) -> tuple[httpx.AsyncClient, timedelta]:
    """Log in and return a bearer-authenticated client and the token validity.

    The login itself uses a throwaway client from the factory; the returned
    client is a second one from the same factory with the ``Authorization``
    header baked in, so no per-request header handling is needed afterwards.

    Args:
        login_parameters: Client factory and credentials.

    Returns:
        The authenticated client and how long its token is valid for.

    Raises:
        AuthenticationError: On a non-200 login response or an unusable body.
        TransportError: If the token endpoint cannot be reached.
        InvalidHeaderError: If the returned token cannot be used as a header.
        ClientConstructionError: If the client factory fails.

    """
    token, validity = await _request_token(login_parameters)
    authorization = bearer_auth_header(token)

    client = _build_client(login_parameters)
    client.headers["Authorization"] = authorization
    logger.debug("Obtained FINRA access token valid for %s.", validity)
    return client, validity


__all__ = [
    "OAUTH2_ENDPOINT",
    "ClientFactory",
    "LoginParameters",
    "authenticate",
    "basic_auth_header",
    "bearer_auth_header",
]
