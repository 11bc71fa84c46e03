from __future__ import annotations

import ipaddress
import logging
from collections.abc import Iterable

from nodegate.engine.peer_roster import IPAddress, PeerRoster
from nodegate.models.access import AccessDecision, AccessReason, MembershipAssertion

logger = logging.getLogger(__name__)

LOOPBACK_LITERALS = frozenset({"127.0.0.1", "::1", "localhost"})

DEFAULT_OVERLAY_NETWORKS = ("100.64.0.0/10", "fd7a:115c:a1e0::/48")

IPNetwork = ipaddress.IPv4Network | ipaddress.IPv6Network


def split_host_port(remote_address: str) -> str:
    """Strip an optional port suffix from a client address.

    Accepts ``host:port``, ``[v6]:port`` and ``[v6]``. A bare IPv6 literal
    has more than one colon and is returned unchanged.
    """
    address = remote_address.strip()
    if address.startswith("["):
        end = address.find("]")
        if end == -1:
            return address
        return address[1:end]
    if address.count(":") == 1:
        return address.rpartition(":")[0]
    return address


def effective_address(addr: IPAddress) -> IPAddress:
    """Resolve IPv4-mapped IPv6 literals to the IPv4 address they carry."""
    if isinstance(addr, ipaddress.IPv6Address) and addr.ipv4_mapped is not None:
        return addr.ipv4_mapped
    return addr


class AccessGate:
    """Decides whether a caller is inside the overlay network or on this host.

    Rules are evaluated in order and the first match wins: loopback literal,
    overlay address range, this node's own overlay address. Anything else,
    including an address that does not parse, is denied.

    The roster lookup only admits the node's own overlay addresses, not
    every peer on the overlay. Requests from other peers are admitted by
    the address-range rule.
    """

    def __init__(
        self,
        overlay_networks: Iterable[str | IPNetwork] = DEFAULT_OVERLAY_NETWORKS,
        peer_roster: PeerRoster | None = None,
    ) -> None:
        self.overlay_networks: tuple[IPNetwork, ...] = tuple(
            ipaddress.ip_network(n, strict=False) for n in overlay_networks
        )
        self._peer_roster = peer_roster

    def set_peer_roster(self, peer_roster: PeerRoster | None) -> None:
        self._peer_roster = peer_roster

    @property
    def peer_roster(self) -> PeerRoster | None:
        return self._peer_roster

    # ── decision ─────────────────────────────────────────

    def decide(self, remote_address: str) -> AccessDecision:
        host = split_host_port(remote_address)

        if host in LOOPBACK_LITERALS:
            return AccessDecision(allow=True, reason=AccessReason.LOCALHOST, host=host)

        try:
            addr = effective_address(ipaddress.ip_address(host))
        except ValueError:
            logger.warning("Invalid client address %r", remote_address)
            return AccessDecision(allow=False, reason=AccessReason.INVALID_ADDRESS, host=host)

        if str(addr) in LOOPBACK_LITERALS:
            return AccessDecision(allow=True, reason=AccessReason.LOCALHOST, host=host)

        if self.in_overlay_range(addr):
            return AccessDecision(allow=True, reason=AccessReason.OVERLAY_RANGE, host=host)

        if self.is_known_peer(addr):
            return AccessDecision(allow=True, reason=AccessReason.KNOWN_PEER, host=host)

        return AccessDecision(allow=False, reason=AccessReason.NOT_A_MEMBER, host=host)

    def assess(self, remote_address: str) -> MembershipAssertion | None:
        """Evaluate every membership fact without short-circuiting.

        Returns ``None`` when the address cannot be parsed.
        """
        host = split_host_port(remote_address)
        if host in LOOPBACK_LITERALS:
            return MembershipAssertion(is_localhost=True)
        try:
            addr = effective_address(ipaddress.ip_address(host))
        except ValueError:
            return None
        return MembershipAssertion(
            is_localhost=str(addr) in LOOPBACK_LITERALS,
            is_in_overlay_range=self.in_overlay_range(addr),
            is_known_peer=self.is_known_peer(addr),
        )

    # ── rules ────────────────────────────────────────────

    def in_overlay_range(self, addr: IPAddress) -> bool:
        return any(
            addr.version == net.version and addr in net
            for net in self.overlay_networks
        )

    def is_known_peer(self, addr: IPAddress) -> bool:
        roster = self._peer_roster
        if roster is None:
            return False
        try:
            own = roster.self_addresses()
        except Exception:
            logger.exception("Peer roster lookup failed")
            return False
        if not own:
            return False
        return any(addr == effective_address(peer) for peer in own)
