"""
Logo lookup and color branding for clients.

The logo is guessed from the client's name (Clearbit). When it loads, its
colors replace the client's default palette; when it does not, any stored
logo is cleared so the board falls back to the client's initials.
"""

import logging

import httpx

from mona import config, mutations
from mona.colors import extract_colors
from mona.entities import (
    DEFAULT_BASE_COLOR,
    DEFAULT_HEADER_COLOR,
    DEFAULT_SIDEBAR_COLOR,
    clearbit_url,
)

logger = logging.getLogger(__name__)

_DEFAULT_PALETTE = {
    "baseColor": DEFAULT_BASE_COLOR,
    "headerColor": DEFAULT_HEADER_COLOR,
    "sidebarColor": DEFAULT_SIDEBAR_COLOR,
}


def has_default_palette(client: dict) -> bool:
    return all(client.get(key) in (None, "", value) for key, value in _DEFAULT_PALETTE.items())


def fetch_logo(url: str, http: httpx.Client | None = None) -> bytes | None:
    """Download a logo. Returns None on any transport or HTTP error."""
    owned = http is None
    http = http or httpx.Client(timeout=config.LOGO_FETCH_TIMEOUT_SECONDS, follow_redirects=True)
    try:
        response = http.get(url)
        response.raise_for_status()
        return response.content
    except httpx.HTTPError as e:
        logger.info(f"Logo unavailable at {url}: {e}")
        return None
    finally:
        if owned:
            http.close()


def refresh_branding(client: dict, http: httpx.Client | None = None) -> dict:
    """Resolve the client's logo and palette. Usable as a Workspace mutation.

    Returns the input unchanged when the stored logo is already current or
    nothing needs to change.
    """
    name = (client.get("name") or "").strip()
    if not name:
        return client
    url = clearbit_url(name)
    if client.get("logo") == url:
        return client

    data = fetch_logo(url, http)
    colors = extract_colors(data) if data else None
    if colors is None:
        if client.get("logo"):
            logger.info(f"Clearing stale logo for {client.get('id')}")
            return mutations.apply_branding(client, "")
        return client

    palette = colors if has_default_palette(client) else None
    return mutations.apply_branding(client, url, palette)
