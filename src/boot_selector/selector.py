from __future__ import annotations
import functools
import logging
from typing import Any, Dict, Optional

from boot_selector.errors import UnsupportedPlatformError
from boot_selector.platforms.base import BootProvider
from boot_selector.platforms.common import current_platform
from boot_selector.platforms.linux import LinuxBootManager
from boot_selector.platforms.windows import WindowsBootManager


_log = logging.getLogger(__name__)

_PROVIDERS = {
    LinuxBootManager.system: LinuxBootManager,
    WindowsBootManager.system: WindowsBootManager,
}


def select_provider(cfg: Optional[Dict[str, Any]] = None, system: Optional[str] = None) -> BootProvider:
    """Return the boot provider for ``system`` (default: the running OS).

    Raises ``UnsupportedPlatformError`` for anything but Linux and Windows.
    """
    system = system if system is not None else current_platform()
    try:
        provider_cls = _PROVIDERS[system]
    except KeyError:
        raise UnsupportedPlatformError(system) from None
    provider = provider_cls.from_config(cfg or {})
    _log.debug('selected %s for %s', provider.platform_name, system)
    return provider


@functools.lru_cache(maxsize=1)
def get_provider() -> BootProvider:
    """The provider for the running OS with default settings, built once."""
    return select_provider()
