"""REST API routes for FileShare."""

import logging

import httpx
from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse

from discovery.registry import PeerRegistry
from discovery.resolver import NoReachableAddress, resolve_target
from transfer.client import TransferFailed, TransferRejected, send_file
from transfer.models import SendResult
from transfer.storage import save_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")
upload_router = APIRouter()

# These will be injected by main.py at startup
_registry: PeerRegistry | None = None
_device_name = ""
_listen_port = 0
_save_dir = ""
_transfer_client: httpx.AsyncClient | None = None


def init_routes(
    registry: PeerRegistry,
    device_name: str,
    listen_port: int,
    save_dir: str,
    transfer_client: httpx.AsyncClient | None = None,
) -> None:
    """Inject service dependencies into the routes module."""
    global _registry, _device_name, _listen_port, _save_dir, _transfer_client
    _registry = registry
    _device_name = device_name
    _listen_port = listen_port
    _save_dir = save_dir
    _transfer_client = transfer_client


# --- Peers ---

@router.get("/peers")
async def list_peers():
    """Return discovered peers, minus this instance."""
    peers = _registry.list_peers(_device_name, _listen_port)
    return {"peers": [p.model_dump() for p in peers]}


@router.get("/health")
async def health():
    return {"status": "ok"}


# --- Sending ---

@router.post("/send")
async def send_to_peer(peer_id: str = Form(...), file: UploadFile = File(...)):
    """Forward an uploaded file to the selected peer's /upload endpoint."""
    peer = _registry.get_peer(peer_id, _device_name, _listen_port)
    if not peer:
        raise HTTPException(status_code=404, detail="Peer not found")

    try:
        target = resolve_target(peer)
    except NoReachableAddress as e:
        logger.warning(str(e))
        raise HTTPException(
            status_code=400, detail="Selected device has no reachable address"
        )

    content = await file.read()
    try:
        result = await send_file(
            target,
            file.filename or "upload",
            content,
            content_type=file.content_type,
            client=_transfer_client,
        )
    except TransferRejected:
        raise HTTPException(status_code=502, detail="Remote device rejected the file")
    except TransferFailed:
        raise HTTPException(status_code=502, detail="Failed to send file")

    return SendResult(
        peer_id=peer.id,
        target=f"{target.address}:{target.port}",
        path=result.path,
    ).model_dump()


# --- Receiving ---

@upload_router.post("/upload")
async def upload(file: UploadFile | None = File(None)):
    """Store a file pushed by a peer in the downloads folder."""
    if file is None or not file.filename:
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "No file provided"},
        )

    try:
        path = save_upload(_save_dir, file.filename, file.file)
    except (OSError, ValueError) as e:
        logger.error(f"Upload error: {e}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Upload failed"},
        )

    return {"success": True, "path": path}
