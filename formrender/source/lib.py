"""Form definition source.

Reads definitions from the places they are published: raw JSON text
(possibly wrapped in a JSON string), the first ``<pre><code>`` block of an
HTML page, or a remote URL fetched with ``httpx``.

Malformed text is reported by returning None so the caller can decide not to
render; network failures propagate as ``httpx.HTTPError``.
"""

import json
import logging
import re
from html.parser import HTMLParser
from typing import Any, Optional

import httpx

from formrender.config import EnvVar, get_environment

logger = logging.getLogger(__name__)

_CLEANUP_PATTERN = re.compile(r"\x83\n|\n|\s\s+")

JSON_CONTENT_TYPE = "application/json"
HTML_CONTENT_TYPE = "text/html"


def clean_up(content: str) -> str:
    """Strip embedded control characters, newlines and whitespace runs."""
    return _CLEANUP_PATTERN.sub("", content)


def decode(raw_content: str) -> Optional[Any]:
    """Parse definition text.

    Text wrapped in double quotes is a JSON document serialized as a JSON
    string and is parsed twice; anything else is cleaned up first.

    Args:
        raw_content: Definition text.

    Returns:
        The parsed definition, or None when the text is not valid JSON.
    """
    content = raw_content.strip()
    try:
        if len(content) > 1 and content.startswith('"') and content.endswith('"'):
            return json.loads(json.loads(content))
        return json.loads(clean_up(content))
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning("Malformed form definition: %s", e)
        return None


class _CodeBlockParser(HTMLParser):
    """Collects the text of the first ``pre > code`` element."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self._pre_depth = 0
        self._in_code = False
        self._done = False
        self._parts: list[str] = []

    @property
    def content(self) -> Optional[str]:
        return "".join(self._parts) or None

    def handle_starttag(self, tag: str, attrs: list) -> None:
        if self._done:
            return
        if tag == "pre":
            self._pre_depth += 1
        elif tag == "code" and self._pre_depth:
            self._in_code = True

    def handle_endtag(self, tag: str) -> None:
        if self._done:
            return
        if tag == "code" and self._in_code:
            self._in_code = False
            self._done = True
        elif tag == "pre" and self._pre_depth:
            self._pre_depth -= 1

    def handle_data(self, data: str) -> None:
        if self._in_code and not self._done:
            self._parts.append(data)


def extract_form_definition(html: str) -> Optional[Any]:
    """Decode the definition embedded in the first ``pre > code`` block."""
    parser = _CodeBlockParser()
    parser.feed(html)
    parser.close()
    content = parser.content
    if not content:
        logger.debug("No pre > code block found in page")
        return None
    return decode(content)


def form_content_url(url: str, base_origin: Optional[str] = None) -> str:
    """Rewrite a same-origin page URL to the URL of its form content.

    URLs outside ``base_origin`` and JSON URLs are returned unchanged.
    """
    if not base_origin or not url.startswith(base_origin) or ".json" in url:
        return url
    path = url
    if path.endswith(".html"):
        path = path[: path.rfind(".html")]
    return path + get_environment(EnvVar.FORMRENDER_FORM_CONTENT_PATH)


async def fetch_form(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
    base_origin: Optional[str] = None,
) -> Optional[Any]:
    """Fetch a form definition.

    Args:
        url: Definition or page URL.
        client: Optional client to reuse; a short-lived one is created otherwise.
        base_origin: Origin whose page URLs are rewritten to the form content path.

    Returns:
        The decoded definition, or None when the response holds none.

    Raises:
        httpx.HTTPError: If the request fails or returns an error status.
    """
    target = form_content_url(url, base_origin)
    if client is None:
        timeout = get_environment(EnvVar.FORMRENDER_FETCH_TIMEOUT)
        async with httpx.AsyncClient(timeout=timeout) as own_client:
            return await _fetch(own_client, target)
    return await _fetch(client, target)


async def _fetch(client: httpx.AsyncClient, url: str) -> Optional[Any]:
    logger.info("Fetching form definition from %s", url)
    response = await client.get(url)
    response.raise_for_status()

    content_type = response.headers.get("content-type", "")
    if JSON_CONTENT_TYPE in content_type:
        try:
            return response.json()
        except json.JSONDecodeError as e:
            logger.warning("Malformed form definition at %s: %s", url, e)
            return None
    if HTML_CONTENT_TYPE in content_type:
        return extract_form_definition(response.text)

    logger.warning("Unsupported content type %r at %s", content_type, url)
    return None


__all__ = [
    "clean_up",
    "decode",
    "extract_form_definition",
    "form_content_url",
    "fetch_form",
]
