"""The capability contract shared by the per-OS boot providers."""
from __future__ import annotations
from abc import ABC, abstractmethod

from boot_selector.models import BootEntry, BootResult, EntryList
from .common import current_platform


class BootProvider(ABC):
    """Enumerate firmware boot entries and select the one to boot next.

    Implementations shell out to a native tool on every call and keep no
    state besides their static configuration, so calls made from
    different threads never interfere.  None of the operations raise:
    enumeration failures yield an empty ``EntryList`` carrying a
    diagnostic, and mutation failures a ``BootResult`` with
    ``success=False``.
    """

    #: ``platform.system()`` value this provider serves.
    system = ''
    platform_name = ''
    #: True when the whole process must hold an elevated token.
    requires_admin = False

    @property
    def is_available(self) -> bool:
        return current_platform() == self.system

    @abstractmethod
    def enumerate_entries(self) -> EntryList:
        """Return the boot entries in the order the firmware lists them."""
        ...

    @abstractmethod
    def set_next_boot(self, entry: BootEntry, restart: bool = False) -> BootResult:
        """Make ``entry`` the one-time boot target, optionally restarting."""
        ...

    @abstractmethod
    def reboot_now(self) -> BootResult:
        ...

    def __repr__(self) -> str:
        return f'{type(self).__name__}()'
