"""Pick the address to dial for an outbound transfer."""

from discovery.models import PeerRecord, ResolvedTarget


class NoReachableAddress(Exception):
    """The peer announced neither a usable address nor a host."""

    def __init__(self, peer: PeerRecord) -> None:
        super().__init__(f"Peer {peer.name!r} has no reachable address")
        self.peer = peer


def resolve_target(peer: PeerRecord) -> ResolvedTarget:
    """Return the first colon-free address (skips IPv6 literals), else the host."""
    address = next((a for a in peer.addresses if a and ":" not in a), None)
    if not address:
        address = peer.host
    if not address:
        raise NoReachableAddress(peer)
    return ResolvedTarget(address=address, port=peer.port)
