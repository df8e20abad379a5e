"""
HTTP transfer initiator.

Pushes a single file to a peer's /upload endpoint as multipart form data.
No retries: a failed attempt is reported back to the caller as is.
"""

import logging

import httpx
from pydantic import ValidationError

from config import TRANSFER_TIMEOUT
from discovery.models import ResolvedTarget
from transfer.models import UploadResult

logger = logging.getLogger(__name__)


class TransferFailed(Exception):
    """Network error or non-2xx response while uploading to a peer."""


class TransferRejected(TransferFailed):
    """The peer answered, but did not report success."""


async def send_file(
    target: ResolvedTarget,
    file_name: str,
    content: bytes,
    content_type: str | None = None,
    client: httpx.AsyncClient | None = None,
) -> UploadResult:
    """Upload ``content`` as ``file_name`` to the peer at ``target``."""
    url = target.upload_url
    files = {"file": (file_name, content, content_type or "application/octet-stream")}

    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=TRANSFER_TIMEOUT)

    logger.info(f"Sending '{file_name}' ({len(content)} bytes) to {url}")
    try:
        response = await client.post(url, files=files)
    except httpx.HTTPError as e:
        logger.warning(f"Upload to {url} failed: {e}")
        raise TransferFailed(f"Upload to {url} failed: {e}") from e
    finally:
        if owns_client:
            await client.aclose()

    if not response.is_success:
        logger.warning(f"Upload to {url} returned HTTP {response.status_code}")
        raise TransferFailed(f"Upload to {url} returned HTTP {response.status_code}")

    try:
        result = UploadResult.model_validate(response.json())
    except (ValueError, ValidationError) as e:
        raise TransferFailed(f"Unexpected response from {url}: {e}") from e

    if not result.success:
        logger.warning(f"Peer at {url} rejected '{file_name}': {result.message}")
        raise TransferRejected(result.message or "Remote device rejected the file")

    logger.info(f"'{file_name}' sent to {url}")
    return result
