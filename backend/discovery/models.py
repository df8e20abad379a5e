"""Pydantic models for peer discovery."""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field


def _as_str(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, str):
        return value
    return ""


def _as_port(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        port = int(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    return port if 0 <= port <= 65535 else 0


class PeerRecord(BaseModel):
    """Represents a discovered FileShare instance on the LAN."""
    id: str
    name: str
    host: str
    port: int
    addresses: list[str] = Field(default_factory=list)
    txt: dict[str, str] = Field(default_factory=dict)

    @property
    def attributes(self) -> dict[str, str]:
        return self.txt


class ServiceAnnouncement(BaseModel):
    """A peer-up / peer-down payload as handed over by the discovery layer.

    ``host`` is the announced hostname, ``address`` the network address the
    discovery layer resolved the announcement to (if it resolved one).
    """
    name: str = ""
    host: str = ""
    address: str | None = None
    port: int = 0
    addresses: list[str] = Field(default_factory=list)
    txt: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any] | None) -> "ServiceAnnouncement":
        """Build an announcement from untrusted network data.

        Missing or wrongly typed fields fall back to empty defaults instead
        of raising, so a half-broken announcement still yields a usable
        (partial) record.
        """
        if not isinstance(payload, Mapping):
            return cls()

        raw_addresses = payload.get("addresses")
        addresses = []
        if isinstance(raw_addresses, (list, tuple)):
            addresses = [a for a in (_as_str(a) for a in raw_addresses) if a]

        raw_txt = payload.get("txt")
        if raw_txt is None:
            raw_txt = payload.get("attributes")
        txt = {}
        if isinstance(raw_txt, Mapping):
            txt = {_as_str(k): _as_str(v) for k, v in raw_txt.items() if _as_str(k)}

        address = _as_str(payload.get("address")) or None

        return cls(
            name=_as_str(payload.get("name")),
            host=_as_str(payload.get("host")),
            address=address,
            port=_as_port(payload.get("port")),
            addresses=addresses,
            txt=txt,
        )


class ResolvedTarget(BaseModel):
    """Address/port pair chosen for one outbound transfer attempt."""
    address: str
    port: int

    @property
    def upload_url(self) -> str:
        # Interpolated as-is: an IPv6 host would need brackets here.
        return f"http://{self.address}:{self.port}/upload"
