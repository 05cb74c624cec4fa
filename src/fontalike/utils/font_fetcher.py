# -*- coding: utf-8 -*-
"""
src/fontalike/utils/font_fetcher.py

Retrieves the raw bytes of a query font from a URL.

Web fonts are often hot-link protected, so remote requests carry a browser
User-Agent and the Referer/Origin of the page that declared the font.
Inline `data:` URLs are decoded locally without touching the network.
Failures are logged and reported as None; matching then continues by name.
"""

import base64
import binascii
import logging
from typing import Dict, Optional
from urllib.parse import unquote, unquote_to_bytes, urlsplit

import requests

logger = logging.getLogger(__name__)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DEFAULT_TIMEOUT = 10.0


def _origin(url: str) -> Optional[str]:
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        return None
    return f"{parts.scheme}://{parts.netloc}"


def decode_data_url(url: str) -> Optional[bytes]:
    """
    Decodes a `data:[<mediatype>][;base64],<data>` URL.

    Returns:
        Optional[bytes]: The payload, or None if the URL is malformed.
    """
    header, sep, payload = url.partition(",")
    if not sep or not header.lower().startswith("data:"):
        logger.warning("Malformed data URL: missing ',' separator")
        return None
    if header.lower().endswith(";base64"):
        try:
            return base64.b64decode(unquote(payload).strip(), validate=True)
        except (binascii.Error, ValueError) as e:
            logger.warning(f"Malformed base64 data URL: {e}")
            return None
    return unquote_to_bytes(payload)


def build_headers(url: str, referer: Optional[str] = None) -> Dict[str, str]:
    headers = {
        "User-Agent": BROWSER_USER_AGENT,
        "Accept": "*/*",
    }
    referer_value = referer or _origin(url)
    if referer_value:
        headers["Referer"] = referer_value
    origin = _origin(referer) if referer else None
    if origin:
        headers["Origin"] = origin
    return headers


def fetch_font_bytes(
    url: str,
    referer: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> Optional[bytes]:
    """
    Downloads a font file.

    Args:
        url (str): http(s) or data: URL of the font.
        referer (Optional[str]): Page that declared the font; defaults to the
                                 font URL's own origin.
        timeout (float): Socket timeout in seconds.
        session (Optional[requests.Session]): Session to reuse.

    Returns:
        Optional[bytes]: The font bytes, or None on any failure.
    """
    if not url:
        return None
    if url[:5].lower() == "data:":
        return decode_data_url(url)

    http = session if session is not None else requests
    try:
        response = http.get(url, headers=build_headers(url, referer), timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.warning(f"Failed to fetch font from {url}: {e}")
        return None

    if not response.content:
        logger.warning(f"Empty response body for font {url}")
        return None
    return response.content
