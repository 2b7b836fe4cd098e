"""Service layer – bearer-token authentication against the shared API key."""

from __future__ import annotations

import hmac
import logging

from src.imgbed.exceptions import (
    InvalidCredentials,
    MalformedCredentials,
    MissingCredentials,
)

logger = logging.getLogger(__name__)

BEARER_SCHEME = "Bearer"


def verify_bearer(
    header: str | None,
    api_key: str | None,
    *,
    method: str = "",
    path: str = "",
) -> str:
    """
    Check an ``Authorization`` header value and return the accepted token.

    The header must be exactly ``Bearer <token>`` (one space, two parts) and
    ``<token>`` must equal *api_key*.  With no key configured nothing is
    accepted.

    Raises
    ------
    MissingCredentials   – header absent or empty.
    MalformedCredentials – wrong scheme, wrong part count or empty token.
    InvalidCredentials   – token does not match the key.
    """
    # Only presence flags are logged: the header carries the secret.
    logger.info(
        "Upload request %s %s (auth header: %s, api key configured: %s)",
        method, path, bool(header), api_key is not None,
    )

    if not header:
        logger.info("Rejected: missing Authorization header")
        raise MissingCredentials()

    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != BEARER_SCHEME:
        logger.info("Rejected: malformed Authorization header")
        raise MalformedCredentials()

    token = parts[1]
    if not token:
        logger.info("Rejected: empty bearer token")
        raise MalformedCredentials()

    if api_key is None or not hmac.compare_digest(token.encode(), api_key.encode()):
        logger.warning("Rejected: invalid API key")
        raise InvalidCredentials()

    logger.info("API key accepted")
    return token
