from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, NamedTuple, Optional, Union

from boot_selector.errors import BootToolError, ParseYieldedNoEntries


CURRENT_MARKER = '►'


@dataclass(frozen=True)
class BootEntry:
    id: str  # Linux: '0000' style; Windows: '{GUID}'
    name: str
    is_current: bool = False
    is_next: bool = False

    @property
    def display_name(self) -> str:
        if self.is_current:
            return f'{CURRENT_MARKER} {self.name} (Current)'
        return self.name

    def __str__(self) -> str:
        return self.display_name


Diagnostic = Union[BootToolError, ParseYieldedNoEntries, None]


class EntryList(list):
    """Entries from one enumeration, in the order the native tool listed them.

    ``diagnostic`` explains an empty result: the tool error that stopped
    enumeration, or ``ParseYieldedNoEntries`` when the tool ran but nothing
    matched. It is ``None`` when entries were found.
    """

    def __init__(self, entries: Iterable[BootEntry] = (), diagnostic: Diagnostic = None) -> None:
        super().__init__(entries)
        self.diagnostic = diagnostic

    @property
    def ok(self) -> bool:
        return not isinstance(self.diagnostic, BootToolError)

    def current(self) -> Optional[BootEntry]:
        return next((e for e in self if e.is_current), None)

    def find(self, entry_id: str) -> Optional[BootEntry]:
        return next((e for e in self if e.id.lower() == entry_id.lower()), None)


class BootResult(NamedTuple):
    success: bool
    message: str

    @classmethod
    def failed(cls, error: Exception) -> 'BootResult':
        return cls(False, str(error))
