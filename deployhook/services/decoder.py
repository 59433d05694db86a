"""
Request body decoding for GitHub webhook deliveries.

GitHub can deliver either `application/json` or
`application/x-www-form-urlencoded` bodies. In the form case the JSON
document lives in the `payload` field, and that field's value is what gets
signed.
"""

import json
import logging
from typing import Any, Dict, Optional, Tuple
from urllib.parse import parse_qs

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class DecodeError(Exception):
    """Exception raised for malformed webhook bodies."""
    pass


def _parse_json(document: bytes) -> Dict[str, Any]:
    try:
        payload = json.loads(document)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError(f"Invalid JSON payload: {e}") from e

    if not isinstance(payload, dict):
        raise DecodeError("Payload must be a JSON object")

    return payload


def decode_body(content_type: Optional[str], body: bytes) -> Tuple[Dict[str, Any], bytes]:
    """
    Normalize a webhook body into its payload and canonical body.

    Args:
        content_type: Value of the Content-Type header (may be None)
        body: Raw HTTP request body

    Returns:
        Tuple of (payload, canonical_body)
        - payload: Parsed JSON object
        - canonical_body: Bytes the sender signed

    Raises:
        DecodeError: If the body or its payload field is malformed
    """
    if content_type and FORM_CONTENT_TYPE in content_type.lower():
        try:
            form = parse_qs(body.decode("utf-8"), keep_blank_values=True, errors="strict")
        except (UnicodeDecodeError, ValueError) as e:
            raise DecodeError(f"Invalid form body: {e}") from e

        # An empty payload field counts as missing
        payload_field = form.get("payload", [""])[0] or "{}"
        canonical_body = payload_field.encode("utf-8")
        logger.debug(f"Decoded form-encoded delivery ({len(canonical_body)} payload bytes)")
        return _parse_json(canonical_body), canonical_body

    return _parse_json(body), body
