"""
HTTP response caching helpers: ETags, conditional requests and compression.

- generate_etag(): content fingerprint of a JSON payload
- is_fresh(): does the client's If-None-Match already cover that fingerprint?
- wrap(): serialize, maybe compress, and attach cache headers
- cached_json_response(): all of the above as a FastAPI Response (200 or 304)

The fingerprint only has to detect content change for cache validation, so a
fast MD5 over a deterministic serialization is enough.
"""

import gzip
import hashlib
import json
import logging
import zlib
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import brotli
from fastapi import Request, Response, status

logger = logging.getLogger(__name__)

# Bodies smaller than this are sent uncompressed
MIN_COMPRESSION_BYTES = 1024

# Supported encodings, most preferred first
ENCODING_PREFERENCE = ("br", "gzip", "deflate")


class CacheTTL(IntEnum):
    """Cache lifetimes in seconds."""

    SHORT = 60
    MEDIUM = 900
    LONG = 3600


@dataclass
class CachedBody:
    body: bytes
    headers: dict[str, str] = field(default_factory=dict)


def serialize_payload(payload: Any) -> bytes:
    """Deterministic JSON: same payload, same bytes."""
    return json.dumps(
        payload,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    ).encode("utf-8")


def generate_etag(payload: Any) -> str:
    """Strong ETag (quoted MD5 hex digest) for a JSON-serializable payload."""
    return f'"{hashlib.md5(serialize_payload(payload)).hexdigest()}"'


def _opaque_tag(tag: str) -> str:
    tag = tag.strip()
    if tag.startswith("W/"):
        tag = tag[2:]
    return tag


def is_fresh(if_none_match: str | None, etag: str) -> bool:
    """
    Check a client's If-None-Match header against the current ETag.

    Accepts a comma-separated list of candidate tags, weak tags and "*".
    """
    if not if_none_match:
        return False
    candidates = [c.strip() for c in if_none_match.split(",") if c.strip()]
    if "*" in candidates:
        return True
    current = _opaque_tag(etag)
    return any(_opaque_tag(c) == current for c in candidates)


def build_cache_control(
    max_age: int = CacheTTL.SHORT,
    stale_while_revalidate: int | None = None,
    private: bool = True,
) -> str:
    """Build a Cache-Control header value."""
    parts = ["private" if private else "public", f"max-age={int(max_age)}"]
    if stale_while_revalidate is not None:
        parts.append(f"stale-while-revalidate={int(stale_while_revalidate)}")
    return ", ".join(parts)


def choose_encoding(accept_encoding: str | None) -> str | None:
    """Pick the preferred supported encoding the client advertises, if any."""
    if not accept_encoding:
        return None

    accepted: set[str] = set()
    for item in accept_encoding.split(","):
        token, _, params = item.strip().partition(";")
        token = token.strip().lower()
        params = params.replace(" ", "")
        # "gzip;q=0" explicitly refuses the encoding
        if params in ("q=0", "q=0.0", "q=0.00", "q=0.000"):
            continue
        accepted.add(token)

    for encoding in ENCODING_PREFERENCE:
        if encoding in accepted:
            return encoding
    return None


def compress_body(body: bytes, encoding: str) -> bytes:
    if encoding == "br":
        compressed: bytes = brotli.compress(body)
        return compressed
    if encoding == "gzip":
        return gzip.compress(body)
    if encoding == "deflate":
        return zlib.compress(body)
    raise ValueError(f"Unsupported encoding: {encoding}")


def wrap(
    payload: Any,
    etag: str,
    accept_encoding: str | None = None,
    max_age: int = CacheTTL.SHORT,
    stale_while_revalidate: int | None = None,
) -> CachedBody:
    """
    Serialize a payload and attach ETag / Cache-Control headers.

    Compresses when the body is at least MIN_COMPRESSION_BYTES and the client
    accepts br, gzip or deflate. If compression fails the body is sent as-is.
    """
    body = json.dumps(payload, ensure_ascii=False, default=str).encode("utf-8")
    headers = {
        "ETag": etag,
        "Cache-Control": build_cache_control(max_age, stale_while_revalidate),
        "Vary": "Accept-Encoding",
    }

    encoding = choose_encoding(accept_encoding)
    if encoding and len(body) >= MIN_COMPRESSION_BYTES:
        try:
            compressed = compress_body(body, encoding)
        except Exception as e:
            logger.warning(f"{encoding} compression failed, sending uncompressed: {e!r}")
        else:
            logger.debug(f"Compressed response with {encoding}: {len(body)} → {len(compressed)} bytes")
            body = compressed
            headers["Content-Encoding"] = encoding

    return CachedBody(body=body, headers=headers)


def cached_json_response(
    request: Request,
    payload: Any,
    max_age: int = CacheTTL.SHORT,
    stale_while_revalidate: int | None = None,
) -> Response:
    """
    Build a conditional-request-aware JSON response.

    Returns 304 with no body when If-None-Match matches the payload's ETag,
    otherwise 200 with the (possibly compressed) JSON body.
    """
    etag = generate_etag(payload)

    if is_fresh(request.headers.get("if-none-match"), etag):
        return Response(
            status_code=status.HTTP_304_NOT_MODIFIED,
            headers={
                "ETag": etag,
                "Cache-Control": build_cache_control(max_age, stale_while_revalidate),
                "Vary": "Accept-Encoding",
            },
        )

    cached = wrap(
        payload,
        etag,
        accept_encoding=request.headers.get("accept-encoding"),
        max_age=max_age,
        stale_while_revalidate=stale_while_revalidate,
    )
    return Response(content=cached.body, media_type="application/json", headers=cached.headers)
