"""
CSRF state codec.

The whole AuthRequest travels through the Strava redirect chain inside the
OAuth ``state`` parameter, so nothing is stored server-side while the user
is on the Strava consent page.

Wire format: base64url(JSON ``{"v": STATE_VERSION, "req": {...}}``).
A JSON object without ``"v"`` is read as a version 0 payload: the
camelCase request object issued by earlier deployments
(``clientId``, ``redirectUri``, ``scope`` as a list, ...).
"""

import base64
import binascii
import json

from strava_mcp.errors import InvalidCallbackState
from strava_mcp.oauth.model import AuthRequest


STATE_VERSION = 1

LEGACY_FIELDS = {
    "clientId": "client_id",
    "redirectUri": "redirect_uri",
    "scope": "scope",
    "state": "state",
    "responseType": "response_type",
    "codeChallenge": "code_challenge",
    "codeChallengeMethod": "code_challenge_method",
}


def encode_state(request: AuthRequest) -> str:
    payload = {"v": STATE_VERSION, "req": request.to_dict()}
    raw = json.dumps(payload, separators=(",", ":"), sort_keys=True).encode()
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_state(state: str) -> AuthRequest:
    """Decode a state value back into the AuthRequest it was built from.

    Raises:
        InvalidCallbackState: If the value is missing, not base64 JSON,
            of an unknown version, has mistyped fields or no client id.
    """
    if not state:
        raise InvalidCallbackState("Invalid state")

    padded = state + "=" * (-len(state) % 4)
    try:
        raw = base64.b64decode(padded, altchars=b"-_", validate=True)
        payload = json.loads(raw)
    except (binascii.Error, ValueError) as e:
        raise InvalidCallbackState("Invalid state") from e

    if not isinstance(payload, dict):
        raise InvalidCallbackState("Invalid state")

    version = payload.get("v", 0)
    if version == 0:
        fields = {new: payload[old] for old, new in LEGACY_FIELDS.items() if old in payload}
    elif version == STATE_VERSION:
        fields = payload.get("req")
    else:
        raise InvalidCallbackState("Invalid state")

    if not isinstance(fields, dict):
        raise InvalidCallbackState("Invalid state")

    try:
        request = AuthRequest.from_dict(fields)
    except ValueError as e:
        raise InvalidCallbackState("Invalid state") from e
    if not request.client_id:
        raise InvalidCallbackState("Invalid state")
    return request
