"""Downloads folder handling for received files."""

import logging
import os
import shutil
from typing import BinaryIO

logger = logging.getLogger(__name__)


def ensure_downloads_dir(path: str) -> str:
    """Create the downloads folder if needed; failures are only logged."""
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as e:
        logger.error(f"Failed to ensure downloads folder {path} exists: {e}")
    return path


def save_upload(save_dir: str, file_name: str, source: BinaryIO) -> str:
    """Write an uploaded stream into ``save_dir`` under its original name.

    Only the base name is kept, so a crafted name cannot escape the folder.
    An existing file with the same name is overwritten.
    """
    safe_name = os.path.basename(file_name.replace("\\", "/"))
    if not safe_name or safe_name in (".", ".."):
        raise ValueError(f"Invalid file name: {file_name!r}")

    dest = os.path.join(save_dir, safe_name)
    with open(dest, "wb") as f:
        shutil.copyfileobj(source, f)

    logger.info(f"Received file saved to {dest}")
    return dest
