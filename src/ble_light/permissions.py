from __future__ import annotations

import logging
from collections.abc import Callable

_LOGGER = logging.getLogger(__name__)


def _grant_all(permission: str) -> bool:
    return True


class PermissionGate:
    """Answer whether the process holds a Bluetooth capability.

    The gate never prompts and never caches; permissions can be granted or
    revoked from outside the process between two calls. Desktop BLE stacks
    have no per-process capability model, so by default everything is
    granted. Hosts that do gate access pass their own checker.
    """

    def __init__(self, checker: Callable[[str], bool] | None = None) -> None:
        """Init the PermissionGate."""
        self._checker = checker or _grant_all

    def has_permission(self, permission: str) -> bool:
        """Return True if ``permission`` is currently granted."""
        granted = bool(self._checker(permission))
        _LOGGER.debug("Permission %s granted: %s", permission, granted)
        return granted

    def has_permissions(self, *permissions: str) -> bool:
        return all(self.has_permission(permission) for permission in permissions)
