"""Adobe IMS OAuth2 client-credentials token exchange.

A single attempt per call: callers decide whether to retry the whole pipeline,
and tokens are never cached between runs.
"""

from __future__ import annotations

from ..errors import AuthError
from ..models.datatypes import AccessToken, ClientCredentials
from .http import ServiceHTTPClient


class IMSTokenProvider(ServiceHTTPClient):
    """Exchange a client identity for a short-lived bearer token."""

    _service_label = "IMS token"

    def acquire_token(self, credentials: ClientCredentials) -> AccessToken:
        """Request a token with the OAuth2 client-credentials grant."""

        form_payload = {
            "grant_type": "client_credentials",
            "client_id": credentials.client_id,
            "client_secret": credentials.client_secret,
            "scope": ",".join(credentials.scopes),
        }
        response = self._post(
            credentials.token_endpoint,
            on_transport_error=AuthError,
            headers={"Accept": "application/json"},
            form_payload=form_payload,
        )
        body_text = self._response_text(response)
        if not self._is_success(response.status_code):
            raise AuthError(
                f"Failed to get IMS token (HTTP {response.status_code}): "
                f"{self._short_message(body_text)}",
                status_code=response.status_code,
            )

        payload = self._parse_json_object(body_text)
        if payload is None:
            raise AuthError(
                "IMS token endpoint returned a non-JSON body.",
                status_code=response.status_code,
            )
        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token.strip():
            raise AuthError(
                "IMS token response is missing `access_token`.",
                status_code=response.status_code,
            )

        expires_in = payload.get("expires_in")
        return AccessToken(
            access_token=access_token.strip(),
            token_type=str(payload.get("token_type") or "bearer"),
            expires_in=expires_in if isinstance(expires_in, int) else None,
        )
