"""Asynchronous host name resolution with an address-family preference."""

from __future__ import annotations

import asyncio
import logging
import socket
from enum import IntEnum
from typing import Iterable, Optional, Sequence

import dns.asyncresolver
import dns.exception

from .netutils import SockAddr

logger = logging.getLogger(__name__)

_LOCAL_NAMESERVER_PREFIXES = ("127.0.0.1", "::1")


class ResolvMode(IntEnum):
    """Which record types are asked for and which family is preferred."""

    IPV4_ONLY = 0
    IPV6_ONLY = 1
    IPV4_FIRST = 2
    IPV6_FIRST = 3


def _first_of_family(responses: Sequence[SockAddr], family: int) -> Optional[SockAddr]:
    return next((addr for addr in responses if addr.family == family), None)


def choose_address(responses: Sequence[SockAddr], mode: ResolvMode) -> Optional[SockAddr]:
    """Pick the best address from ``responses`` for ``mode``, or None if there is none."""
    if mode is ResolvMode.IPV4_FIRST:
        found = _first_of_family(responses, socket.AF_INET)
        if found is not None:
            return found
    elif mode is ResolvMode.IPV6_FIRST:
        found = _first_of_family(responses, socket.AF_INET6)
        if found is not None:
            return found
    return responses[0] if responses else None


class Resolver:
    """Resolves host names to socket addresses through DNS.

    With no nameservers the system configuration is used. A single local
    nameserver (127.0.0.1 or ::1) makes queries leave from that address.
    """

    def __init__(
        self,
        nameservers: Optional[Iterable[str]] = None,
        ipv6_first: bool = False,
    ) -> None:
        self.mode = ResolvMode.IPV6_FIRST if ipv6_first else ResolvMode.IPV4_FIRST
        servers = list(nameservers) if nameservers is not None else None
        if servers is None:
            self._resolver = dns.asyncresolver.Resolver(configure=True)
        else:
            self._resolver = dns.asyncresolver.Resolver(configure=False)
            self._resolver.nameservers = servers
        self._source: Optional[str] = None
        if servers is not None and len(servers) == 1:
            if servers[0].startswith(_LOCAL_NAMESERVER_PREFIXES):
                logger.info("bind UDP resolver to %s", servers[0])
                self._source = servers[0]
        self._pending: dict[str, set[asyncio.Task]] = {}
        self._cancelled: set[asyncio.Task] = set()
        self._closed = False

    @property
    def nameservers(self) -> list:
        """The nameservers queries are sent to."""
        return list(self._resolver.nameservers)

    async def _lookup_type(self, hostname: str, rdtype: str) -> list[str]:
        kwargs = {}
        if self._source is not None:
            kwargs["source"] = self._source
        try:
            answer = await self._resolver.resolve(hostname, rdtype, **kwargs)
        except dns.exception.DNSException as exc:
            family = "IPv4" if rdtype == "A" else "IPv6"
            logger.info("%s resolv: %s", family, exc)
            return []
        return [record.address for record in answer]

    async def _lookup(self, hostname: str, port: int) -> Optional[SockAddr]:
        v4_wanted = self.mode is not ResolvMode.IPV6_ONLY
        v6_wanted = self.mode is not ResolvMode.IPV4_ONLY
        v4, v6 = await asyncio.gather(
            self._lookup_type(hostname, "A") if v4_wanted else _nothing(),
            self._lookup_type(hostname, "AAAA") if v6_wanted else _nothing(),
        )
        responses = [SockAddr(socket.AF_INET, (address, port)) for address in v4]
        responses += [SockAddr(socket.AF_INET6, (address, port, 0, 0)) for address in v6]
        return choose_address(responses, self.mode)

    async def query(self, hostname: str, port: int = 0) -> Optional[SockAddr]:
        """Resolve ``hostname`` and return the preferred address with ``port``.

        Returns None when nothing was found or the query was cancelled.
        """
        if self._closed:
            raise RuntimeError("resolver is shut down")
        task = asyncio.ensure_future(self._lookup(hostname, port))
        self._pending.setdefault(hostname, set()).add(task)
        try:
            return await task
        except asyncio.CancelledError:
            if task in self._cancelled:
                return None
            raise
        finally:
            self._cancelled.discard(task)
            tasks = self._pending.get(hostname)
            if tasks is not None:
                tasks.discard(task)
                if not tasks:
                    del self._pending[hostname]

    def cancel(self, hostname: str) -> int:
        """Cancel the pending queries for ``hostname``; return how many were cancelled."""
        count = 0
        for task in list(self._pending.get(hostname, ())):
            if not task.done():
                self._cancelled.add(task)
                task.cancel()
                count += 1
        return count

    def shutdown(self) -> None:
        """Cancel every pending query and refuse new ones."""
        self._closed = True
        for hostname in list(self._pending):
            self.cancel(hostname)


async def _nothing() -> list[str]:
    return []