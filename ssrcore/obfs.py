"""Lookup of obfuscation plugins by name and creation of plugin sessions."""

from __future__ import annotations

import copy
import logging
from typing import Optional, Union

from .http_simple import HttpPost, HttpSimple
from .obfsutil import ServerInfo, init_shift128plus

logger = logging.getLogger(__name__)

ObfsPlugin = Union[HttpSimple, HttpPost]

_PASSTHROUGH = frozenset({"origin", "plain"})

_PLUGINS: dict[str, type[HttpSimple]] = {
    "http_simple": HttpSimple,
    "http_post": HttpPost,
}


class UnknownObfsError(LookupError):
    """Raised when no obfuscation plugin exists under the requested name."""


def new_obfs_class(name: Optional[str]) -> Optional[type[HttpSimple]]:
    """Return the plugin class registered under ``name``.

    ``None``, ``"origin"`` and ``"plain"`` mean no obfuscation and give None.
    Any other unknown name raises :class:`UnknownObfsError`.
    """
    if name is None or name in _PASSTHROUGH:
        return None
    init_shift128plus()
    try:
        return _PLUGINS[name]
    except KeyError:
        logger.error("Load obfs '%s' failed", name)
        raise UnknownObfsError(f"Load obfs '{name}' failed") from None


def new_obfs(name: Optional[str], server: Optional[ServerInfo] = None) -> Optional[ObfsPlugin]:
    """Create a session of the plugin ``name`` working on a copy of ``server``.

    Returns None when ``name`` selects no obfuscation.
    """
    plugin = new_obfs_class(name)
    if plugin is None:
        return None
    return plugin(copy.copy(server) if server is not None else ServerInfo())