"""
mDNS/DNS-SD discovery service.

Publishes this FileShare instance on the LAN and browses for other
instances, feeding what it sees into the PeerRegistry.
"""

import asyncio
import logging
import socket

from zeroconf import IPVersion, ServiceBrowser, ServiceInfo, ServiceListener, Zeroconf
from zeroconf.asyncio import AsyncServiceInfo, AsyncZeroconf

from config import APP_NAME, RESOLVE_TIMEOUT_MS, SERVICE_TYPE
from discovery.models import ServiceAnnouncement
from discovery.registry import PeerRegistry, peer_key

logger = logging.getLogger(__name__)


def get_local_ip() -> str:
    """Best guess at the LAN address of this machine."""
    s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        # No packet is sent; this only selects the outbound interface
        s.connect(("10.255.255.255", 1))
        return s.getsockname()[0]
    except OSError:
        return "127.0.0.1"
    finally:
        s.close()


def instance_name(service_type: str, name: str) -> str:
    """Strip the service type suffix from a fully qualified instance name."""
    suffix = "." + service_type
    if name.endswith(suffix):
        return name[: -len(suffix)]
    return name


def announcement_from_info(service_type: str, name: str, info: ServiceInfo) -> ServiceAnnouncement:
    """Translate a resolved zeroconf ServiceInfo into an announcement."""
    ipv4 = info.parsed_addresses(IPVersion.V4Only)
    return ServiceAnnouncement.from_payload({
        "name": instance_name(service_type, name),
        "host": (info.server or "").rstrip("."),
        "address": ipv4[0] if ipv4 else None,
        "port": info.port,
        "addresses": info.parsed_addresses(),
        "txt": info.properties or {},
    })


class DiscoveryListener(ServiceListener):
    """Browser callbacks; zeroconf calls these from its own thread."""

    def __init__(self, service: "DiscoveryService", loop: asyncio.AbstractEventLoop):
        self.service = service
        self._loop = loop

    def add_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        self._schedule(self.service.handle_up(zc, type_, name))

    def update_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        self._schedule(self.service.handle_up(zc, type_, name))

    def remove_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        self._schedule(self.service.handle_down(type_, name))

    def _schedule(self, coro) -> None:
        try:
            asyncio.run_coroutine_threadsafe(coro, self._loop)
        except RuntimeError as e:
            coro.close()
            logger.debug(f"Dropping discovery event, loop unavailable: {e}")


class DiscoveryService:
    """Manages LAN peer discovery via zeroconf."""

    def __init__(self, registry: PeerRegistry, device_name: str, port: int) -> None:
        self.registry = registry
        self._device_name = device_name
        self._port = port
        self._aiozc: AsyncZeroconf | None = None
        self._browser: ServiceBrowser | None = None
        self._service_info: ServiceInfo | None = None
        # Last up announcement per instance name; remove callbacks only
        # carry the name, the registry needs host/port/addresses.
        self._announced: dict[str, ServiceAnnouncement] = {}
        # Removals seen per instance name; lets handle_up drop a result
        # that was still resolving when the service went away.
        self._removals: dict[str, int] = {}

    @property
    def device_name(self) -> str:
        return self._device_name

    @property
    def port(self) -> int:
        return self._port

    @property
    def service_name(self) -> str:
        return f"{self._device_name} - {APP_NAME}.{SERVICE_TYPE}"

    async def start(self) -> None:
        """Publish our service and start browsing for peers."""
        local_ip = get_local_ip()
        logger.info(f"Starting discovery for {SERVICE_TYPE} ({local_ip}:{self._port})")

        self._aiozc = AsyncZeroconf()
        self._service_info = ServiceInfo(
            SERVICE_TYPE,
            self.service_name,
            addresses=[socket.inet_aton(local_ip)],
            port=self._port,
            properties={"device": self._device_name},
            server=f"{socket.gethostname()}.local.",
        )
        await self._aiozc.async_register_service(self._service_info)

        listener = DiscoveryListener(self, asyncio.get_running_loop())
        self._browser = ServiceBrowser(self._aiozc.zeroconf, SERVICE_TYPE, listener)
        logger.info("Discovery service started")

    async def stop(self) -> None:
        """Withdraw our service and stop browsing."""
        if self._browser:
            self._browser.cancel()
            self._browser = None
        if self._aiozc:
            if self._service_info:
                await self._aiozc.async_unregister_service(self._service_info)
                self._service_info = None
            await self._aiozc.async_close()
            self._aiozc = None
        self._announced.clear()
        self._removals.clear()
        self.registry.clear()
        logger.info("Discovery service stopped")

    async def handle_up(self, zc: Zeroconf, type_: str, name: str) -> None:
        """Resolve an added/updated service and register it as a peer."""
        generation = self._removals.get(name, 0)
        try:
            info = AsyncServiceInfo(type_, name)
            if not await info.async_request(zc, RESOLVE_TIMEOUT_MS):
                logger.debug(f"Could not resolve service {name}")
                return
            announcement = announcement_from_info(type_, name, info)
        except Exception as e:
            logger.debug(f"Ignoring unresolvable announcement {name}: {e}")
            return

        if self._removals.get(name, 0) != generation:
            logger.debug(f"Service {name} was removed while resolving, dropping it")
            return

        previous = self._announced.get(name)
        if previous is not None and peer_key(previous) != peer_key(announcement):
            # Re-announced under a new host or port; retire the old record first
            self.registry.on_peer_down(previous)

        self._announced[name] = announcement
        self.registry.on_peer_up(announcement)

    async def handle_down(self, type_: str, name: str) -> None:
        """Reconcile a removed service against the registry."""
        self._removals[name] = self._removals.get(name, 0) + 1
        announcement = self._announced.pop(name, None)
        if announcement is None:
            logger.debug(f"Removal of unknown service {name}")
            return
        self.registry.on_peer_down(announcement)
