"""
GitHub webhook signature verification.

GitHub signs each delivery with HMAC-SHA256 over the body using the shared
webhook secret and sends the result as `X-Hub-Signature-256: sha256=<hex>`.
"""

import hashlib
import hmac
from typing import Optional, Union

SIGNATURE_PREFIX = "sha256="


def _to_bytes(value: Union[str, bytes]) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return value


def sign_payload(raw_body: bytes, secret: Union[str, bytes]) -> str:
    """
    Compute the `X-Hub-Signature-256` header value for a body.

    Args:
        raw_body: Exact bytes that were sent
        secret: Shared webhook secret

    Returns:
        "sha256=" followed by the lowercase hex digest
    """
    digest = hmac.new(_to_bytes(secret), raw_body, hashlib.sha256).hexdigest()
    return SIGNATURE_PREFIX + digest


def verify_signature(
    raw_body: bytes,
    signature_header: Optional[Union[str, bytes]],
    secret: Union[str, bytes],
) -> bool:
    """
    Verify a GitHub webhook signature.

    An empty secret never verifies anything, so an unconfigured deployment
    refuses every delivery instead of accepting them.

    Returns:
        bool: True only if the header matches the expected signature
    """
    if not secret or not signature_header:
        return False

    expected = sign_payload(raw_body, secret).encode("ascii")
    received = _to_bytes(signature_header)

    # Length is not secret-dependent, so it may short-circuit
    if len(received) != len(expected):
        return False

    # compare_digest inspects every byte even after a mismatch
    return hmac.compare_digest(expected, received)
