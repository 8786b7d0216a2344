"""
Document loading.

Reads the source document once at startup, either from a local path
or from an http(s) URL. Failures raise DocumentUnavailable; there is
no retry loop, the user is expected to fix the source and try again.
"""

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import httpx

from .errors import DocumentUnavailable

logger = logging.getLogger(__name__)

DOCUMENT_SOURCE = "bom.txt"
REQUEST_TIMEOUT = 30.0


def is_url(source: str) -> bool:
    return urlparse(source).scheme in ("http", "https")


def decode_document(content: bytes) -> str:
    """Decode as UTF-8, replacing invalid bytes and dropping a BOM."""
    return content.decode("utf-8-sig", errors="replace")


def read_local_document(path: Path) -> str:
    """Read a document from the filesystem."""
    path = Path(path)
    try:
        content = path.read_bytes()
    except FileNotFoundError as e:
        raise DocumentUnavailable(f"Document not found: {path}", source=str(path)) from e
    except OSError as e:
        raise DocumentUnavailable(f"Could not read {path}: {e}", source=str(path)) from e
    return decode_document(content)


async def fetch_remote_document(
    url: str,
    timeout: float = REQUEST_TIMEOUT,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """
    Fetch a document over HTTP.

    Args:
        url: Document URL
        timeout: Request timeout in seconds
        client: Optional client to reuse (its own timeout applies)

    Raises:
        DocumentUnavailable: on transport errors or a non-success status
    """
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=httpx.Timeout(timeout), follow_redirects=True)

    try:
        response = await client.get(url)
    except httpx.HTTPError as e:
        raise DocumentUnavailable(f"Could not fetch {url}: {e}", source=url) from e
    finally:
        if owns_client:
            await client.aclose()

    if not response.is_success:
        raise DocumentUnavailable(
            f"Could not fetch {url}: HTTP {response.status_code}",
            source=url,
            status_code=response.status_code,
        )
    return decode_document(response.content)


async def load_document(
    source: str = DOCUMENT_SOURCE,
    timeout: float = REQUEST_TIMEOUT,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """
    Load the raw document from a path or URL.

    Returns:
        Document text
    """
    if is_url(source):
        logger.info(f"Fetching document from {source}")
        return await fetch_remote_document(source, timeout=timeout, client=client)

    logger.info(f"Reading document from {source}")
    return read_local_document(Path(source))
