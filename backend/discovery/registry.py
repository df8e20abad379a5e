"""
In-memory peer registry.

Folds discovery announcements (peer up / peer down) into a de-duplicated
map of reachable peers and serves self-filtered snapshots of it.
"""

import logging
import threading

from discovery.models import PeerRecord, ServiceAnnouncement

logger = logging.getLogger(__name__)


def peer_key(announcement: ServiceAnnouncement) -> str:
    """Dedup key for an announcement: ``name|host|port``, joined raw."""
    return f"{announcement.name}|{announcement.host}|{announcement.port}"


class PeerRegistry:
    """Owns the map of currently announced peers."""

    def __init__(self) -> None:
        self._peers: dict[str, PeerRecord] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._peers)

    def on_peer_up(self, announcement: ServiceAnnouncement) -> None:
        """Insert or replace the peer described by an up announcement."""
        key = peer_key(announcement)
        peer = PeerRecord(
            id=key,
            name=announcement.name,
            host=announcement.address or announcement.host or "",
            port=announcement.port,
            addresses=list(announcement.addresses),
            txt=dict(announcement.txt),
        )

        with self._lock:
            is_new = key not in self._peers
            self._peers[key] = peer

        if is_new:
            logger.info(f"Discovered peer: {peer.name} ({peer.host}:{peer.port})")
        else:
            logger.debug(f"Updated peer: {peer.name} ({peer.host}:{peer.port})")

    def on_peer_down(self, announcement: ServiceAnnouncement) -> list[PeerRecord]:
        """Remove every peer the down announcement plausibly refers to.

        Teardown notifications do not always echo the identity used at
        announce time, so removal matches on port plus either the host or
        any shared address rather than on the key.
        """
        hosts = {announcement.host}
        if announcement.address:
            hosts.add(announcement.address)
        gone_addresses = set(announcement.addresses)

        removed = []
        with self._lock:
            for key, peer in list(self._peers.items()):
                if peer.port != announcement.port:
                    continue
                if peer.host in hosts or gone_addresses.intersection(peer.addresses):
                    removed.append(self._peers.pop(key))

        for peer in removed:
            logger.info(f"Peer lost: {peer.name} ({peer.host}:{peer.port})")
        if not removed:
            logger.debug(
                f"Down announcement for {announcement.host or '?'}:{announcement.port} "
                "matched no known peer"
            )
        return removed

    def list_peers(self, local_name: str, local_port: int) -> list[PeerRecord]:
        """Return a snapshot of known peers without this instance.

        Self-exclusion is a heuristic: a record is treated as ourselves when
        it listens on our port and its name contains our display name.
        """
        with self._lock:
            peers = list(self._peers.values())
        return [
            p for p in peers
            if not (p.port == local_port and local_name in p.name)
        ]

    def get_peer(self, peer_id: str, local_name: str, local_port: int) -> PeerRecord | None:
        """Look up a single peer from the self-filtered view."""
        return next(
            (p for p in self.list_peers(local_name, local_port) if p.id == peer_id),
            None,
        )

    def clear(self) -> None:
        """Forget every known peer."""
        with self._lock:
            self._peers.clear()
