from __future__ import annotations

import ipaddress
import logging
from collections.abc import Iterable, Sequence
from typing import Protocol

from nodegate.commands import CommandError, run_command

logger = logging.getLogger(__name__)

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address


class PeerRoster(Protocol):
    """Narrow view of the overlay stack: the local node's own addresses.

    ``None`` means the roster cannot be consulted right now.
    """

    def self_addresses(self) -> frozenset[IPAddress] | None: ...


class StaticPeerRoster:
    """Fixed set of addresses, for embedding and tests."""

    def __init__(self, addresses: Iterable[str | IPAddress]) -> None:
        self._addresses = frozenset(ipaddress.ip_address(a) for a in addresses)

    def self_addresses(self) -> frozenset[IPAddress] | None:
        return self._addresses


class CommandPeerRoster:
    """Asks the overlay CLI (``tailscale ip`` by default) for this node's addresses."""

    def __init__(self, argv: Sequence[str], timeout: float | None = None) -> None:
        self._argv = list(argv)
        self._timeout = timeout

    def self_addresses(self) -> frozenset[IPAddress] | None:
        try:
            output = run_command(self._argv, timeout=self._timeout)
        except CommandError as exc:
            logger.debug("Peer roster unavailable: %s", exc)
            return None

        addresses = parse_address_lines(output)
        return addresses or None


def parse_address_lines(output: str) -> frozenset[IPAddress]:
    addresses: set[IPAddress] = set()
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            addresses.add(ipaddress.ip_address(line))
        except ValueError:
            logger.debug("Ignoring roster line %r", line)
    return frozenset(addresses)
