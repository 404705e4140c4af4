"""
OAuth Module

One-legged OAuth 1.0a request signing (HMAC-SHA1) for the X API.
The account's permanent access token is used directly, so no
authorization handshake takes place.
"""

import base64
import hashlib
import hmac
import time
import uuid
from typing import Dict, Mapping, Optional
from urllib.parse import quote

from services.protocols import XCredentials

SIGNATURE_METHOD = "HMAC-SHA1"
OAUTH_VERSION = "1.0"


def percent_encode(value: str) -> str:
    """Percent-encode per RFC 3986, leaving only A-Z a-z 0-9 - . _ ~ unescaped."""
    return quote(str(value), safe="~")


def _normalize_params(params: Mapping[str, str]) -> str:
    encoded = [(percent_encode(k), percent_encode(v)) for k, v in params.items()]
    encoded.sort()
    return "&".join(f"{k}={v}" for k, v in encoded)


def generate_oauth_signature(method: str, url: str, params: Mapping[str, str],
                             consumer_secret: str, token_secret: str) -> str:
    """
    Compute the OAuth 1.0a HMAC-SHA1 signature of a request.

    Args:
        method: HTTP method
        url: Request URL without query string
        params: Every oauth_* and request parameter to sign
        consumer_secret: API key secret
        token_secret: Access token secret

    Returns:
        str: Base64 encoded signature
    """
    base_string = "&".join([
        method.upper(),
        percent_encode(url),
        percent_encode(_normalize_params(params)),
    ])
    signing_key = f"{percent_encode(consumer_secret)}&{percent_encode(token_secret)}"

    digest = hmac.new(signing_key.encode("utf-8"), base_string.encode("utf-8"), hashlib.sha1).digest()
    return base64.b64encode(digest).decode("ascii")


def generate_oauth_header(method: str, url: str, params: Optional[Mapping[str, str]],
                          credentials: XCredentials, timestamp: Optional[str] = None,
                          nonce: Optional[str] = None) -> str:
    """
    Build the Authorization header value for a signed request.

    Args:
        method: HTTP method
        url: Request URL without query string
        params: Extra request parameters to sign (JSON bodies are not signed)
        credentials: Account credentials
        timestamp: Unix seconds, defaults to now
        nonce: Unique request token, defaults to a fresh UUID

    Returns:
        str: 'OAuth key="value", ...' over the oauth_* parameters
    """
    oauth_params: Dict[str, str] = {
        "oauth_consumer_key": credentials.api_key,
        "oauth_token": credentials.access_token,
        "oauth_signature_method": SIGNATURE_METHOD,
        "oauth_timestamp": timestamp or str(int(time.time())),
        "oauth_nonce": nonce or str(uuid.uuid4()),
        "oauth_version": OAUTH_VERSION,
    }
    oauth_params.update(params or {})

    oauth_params["oauth_signature"] = generate_oauth_signature(
        method,
        url,
        oauth_params,
        credentials.api_secret,
        credentials.access_token_secret,
    )

    header_params = ", ".join(
        f'{percent_encode(key)}="{percent_encode(oauth_params[key])}"'
        for key in sorted(oauth_params)
        if key.startswith("oauth_")
    )
    return f"OAuth {header_params}"
