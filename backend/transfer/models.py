"""Pydantic models for file transfer."""

from pydantic import BaseModel


class UploadResult(BaseModel):
    """Body returned by a peer's /upload endpoint."""
    success: bool
    path: str | None = None
    message: str | None = None


class SendResult(BaseModel):
    """Body returned by /api/send once the peer accepted the file."""
    success: bool = True
    message: str = "File sent successfully"
    peer_id: str
    target: str
    path: str | None = None
