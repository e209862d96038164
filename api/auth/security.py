"""
API key helpers.

Keys look like "lv_<43 url-safe chars>". Only the SHA-256 digest is stored,
so a leaked database does not leak usable keys.
"""

from __future__ import annotations

import hashlib
import secrets

API_KEY_PREFIX = "lv_"
API_KEY_TOKEN_BYTES = 32


def build_api_key() -> str:
    return API_KEY_PREFIX + secrets.token_urlsafe(API_KEY_TOKEN_BYTES)


def hash_api_key(raw_api_key: str) -> str:
    key = (raw_api_key or "").strip().encode("utf-8")
    if not key:
        raise ValueError("API key is empty.")
    return hashlib.sha256(key).hexdigest()


def looks_like_api_key(raw_api_key: str) -> bool:
    key = (raw_api_key or "").strip()
    return key.startswith(API_KEY_PREFIX) and len(key) > len(API_KEY_PREFIX)
