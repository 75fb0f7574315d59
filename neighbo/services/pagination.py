"""
Opaque cursor tokens for keyset pagination.

A token names the last record of the previous page. Callers must treat it as
opaque; anything that does not decode cleanly means "start from the top".
"""
import base64
import binascii
import json
from typing import Optional


def encode_cursor(last_doc_id: str) -> str:
    """Encode the id of the last record on a page as a base64url token."""
    payload = json.dumps({"lastDocId": last_doc_id}, separators=(",", ":"))
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii").rstrip("=")


def decode_cursor(cursor: Optional[str]) -> Optional[str]:
    """
    Decode a token back into a record id.

    Returns None for a missing, malformed, or foreign token; never raises.
    """
    if not cursor:
        return None
    try:
        padded = cursor + "=" * (-len(cursor) % 4)
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
        decoded = json.loads(raw.decode("utf-8"))
    except (ValueError, binascii.Error, UnicodeError):
        return None

    if not isinstance(decoded, dict):
        return None
    last_doc_id = decoded.get("lastDocId")
    return last_doc_id if isinstance(last_doc_id, str) else None
