"""
Remote document fetcher for OpenID Connect discovery documents.

The same call serves installation-specific JSON files on disk and discovery
documents published by the identity provider, so a deployment can pin its
endpoints locally by pointing the discovery URI at a file.
"""

import json
import logging
import os
from typing import Any

import httpx

logger = logging.getLogger("aadsso.sso.discovery")

DEFAULT_DISCOVERY_TIMEOUT = 10.0


class DocumentFetchError(OSError):
    """Raised when a document cannot be read from disk or retrieved over HTTP."""
    pass


class DocumentParseError(ValueError):
    """Raised when a fetched document is not a JSON object."""
    pass


def _parse_document(body: str | bytes, uri: str) -> dict[str, Any]:
    try:
        document = json.loads(body)
    except (TypeError, ValueError) as e:
        raise DocumentParseError(f"Document at {uri} is not valid JSON: {e}") from e

    if not isinstance(document, dict):
        raise DocumentParseError(
            f"Document at {uri} must be a JSON object, got {type(document).__name__}"
        )
    return document


def _read_local_document(path: str) -> bytes:
    # Bytes, like the HTTP path: decoding errors surface as DocumentParseError
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise DocumentFetchError(f"Unable to read settings file {path}: {e}") from e


async def _get_remote_document(uri: str, timeout: float) -> bytes:
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.get(uri)
            response.raise_for_status()
            return response.content
    except httpx.TimeoutException as e:
        raise DocumentFetchError(f"Timed out fetching {uri}") from e
    except httpx.HTTPStatusError as e:
        raise DocumentFetchError(
            f"HTTP error {e.response.status_code} fetching {uri}"
        ) from e
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise DocumentFetchError(f"Failed to fetch {uri}: {e}") from e


async def fetch_json_document(
    uri: str,
    timeout: float = DEFAULT_DISCOVERY_TIMEOUT,
) -> dict[str, Any]:
    """
    Load a JSON object from a local file or an HTTP(S) URL.

    Args:
        uri: Filesystem path or URL of the document
        timeout: HTTP timeout in seconds (unused for local files)

    Returns:
        The parsed JSON object

    Raises:
        DocumentFetchError: The file could not be read or the request failed
        DocumentParseError: The body is not a JSON object
    """
    if not uri:
        raise DocumentFetchError("No document URI configured")

    if os.path.isfile(uri):
        logger.debug(f"Loading settings document from file {uri}")
        body = _read_local_document(uri)
    else:
        logger.debug(f"Fetching settings document from {uri}")
        body = await _get_remote_document(uri, timeout)

    return _parse_document(body, uri)


class DiscoveryFetcher:
    """Injectable wrapper around ``fetch_json_document`` with a fixed timeout."""

    def __init__(self, timeout: float = DEFAULT_DISCOVERY_TIMEOUT):
        self.timeout = timeout

    async def fetch(self, uri: str) -> dict[str, Any]:
        return await fetch_json_document(uri, timeout=self.timeout)
