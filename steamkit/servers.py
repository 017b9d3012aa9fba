"""Connection manager server addresses: the built-in list and the Steam Directory."""

from __future__ import annotations

import ipaddress
import random
import re
import threading
from dataclasses import dataclass
from typing import Any

import requests

_CM_PORTS = (27017, 27018, 27019)

# Hosts that listen on every CM port, grouped by their /24 network.
_CM_NETWORKS: dict[str, tuple[int, ...]] = {
    "155.133.248": (50, 51, 52, 53),
    "162.254.197": (40, 42, 180, 181),
    "146.66.152": (10, 11),
    "162.254.198": (130, 131, 132, 133),
    "185.25.182": (76, 77),
    "162.254.196": (67, 68, 83, 84),
    "146.66.155": (100, 101),
    "155.133.230": (34, 50),
    "162.254.192": (100, 101, 108, 109),
    "155.133.246": (68, 69),
    "162.254.193": (7, 47),
}

# Hosts that listen on only some of the CM ports.
_CM_PARTIAL: dict[str, tuple[int, ...]] = {
    "162.254.193.6": (27018, 27019),
    "162.254.193.46": (27018, 27019),
}

CM_SERVERS: tuple[str, ...] = tuple(
    f"{network}.{host}:{port}"
    for network, hosts in _CM_NETWORKS.items()
    for host in hosts
    for port in _CM_PORTS
) + tuple(
    f"{address}:{port}" for address, ports in _CM_PARTIAL.items() for port in ports
)

_DIRECTORY_URL = "https://api.steampowered.com/ISteamDirectory/GetCMList/v1/"
_TIMEOUT = 30.0
_PORT_PATTERN = re.compile(r"[0-9]{1,5}")


@dataclass(frozen=True)
class PortAddr:
    """An IPv4 address with a port."""

    ip: ipaddress.IPv4Address
    port: int

    def __str__(self) -> str:
        return f"{self.ip}:{self.port}"


def parse_port_addr(text: str) -> PortAddr:
    """Parse ``a.b.c.d:port``; raises ValueError on anything else."""
    host, sep, port_text = text.rpartition(":")
    if not sep:
        raise ValueError(f"missing port in address: {text!r}")
    ip = ipaddress.IPv4Address(host)
    if not _PORT_PATTERN.fullmatch(port_text) or int(port_text) > 0xFFFF:
        raise ValueError(f"invalid port in address: {text!r}")
    return PortAddr(ip, int(port_text))


def get_random_cm() -> PortAddr:
    """A random server from the built-in list.

    An initialized SteamDirectory gives more up-to-date addresses.
    """
    return parse_port_addr(random.choice(CM_SERVERS))


class DirectoryError(Exception):
    """The Steam Directory did not return a usable server list."""


def _field(mapping: Any, name: str, default: Any = None) -> Any:
    if not isinstance(mapping, dict):
        return default
    if name in mapping:
        return mapping[name]
    folded = name.casefold()
    for key, value in mapping.items():
        if isinstance(key, str) and key.casefold() == folded:
            return value
    return default


class SteamDirectory:
    """A server list fetched from the Steam Directory web API."""

    def __init__(self, session: requests.Session | None = None) -> None:
        self._session = session
        self._lock = threading.RLock()
        self._servers: list[str] = []
        self._initialized = False

    def initialize(self) -> None:
        """Fetch the server list; raises DirectoryError if Steam refuses."""
        with self._lock:
            http = self._session if self._session is not None else requests
            with http.get(
                _DIRECTORY_URL, params={"cellId": "0"}, timeout=_TIMEOUT
            ) as response:
                payload = response.json()
            body = _field(payload, "Response", {})
            result = _field(body, "Result", 0)
            message = _field(body, "Message", "")
            servers = _field(body, "ServerList") or []
            if result != 1:
                raise DirectoryError(
                    f"Failed to get steam directory, result: {result}, message: {message}"
                )
            if not servers:
                raise DirectoryError(
                    "Steam returned zero servers for steam directory request"
                )
            self._servers = list(servers)
            self._initialized = True

    def get_random_cm(self) -> PortAddr:
        with self._lock:
            if not self._initialized:
                raise RuntimeError("steam directory is not initialized")
            return parse_port_addr(random.choice(self._servers))

    def is_initialized(self) -> bool:
        with self._lock:
            return self._initialized


_default_directory = SteamDirectory()


def initialize_steam_directory() -> SteamDirectory:
    """Load the shared directory's server list and return the directory."""
    _default_directory.initialize()
    return _default_directory