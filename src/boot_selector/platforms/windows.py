from __future__ import annotations
import logging
import re
from typing import Dict, List, Optional

from .base import BootProvider
from .common import ElevationBroker, NullBroker, run, spawn
from boot_selector.errors import BootToolError, ParseYieldedNoEntries, PartialMutationFailure, ToolNonZeroExit
from boot_selector.models import BootEntry, BootResult, EntryList


_log = logging.getLogger(__name__)

FW_BOOT_MANAGER = '{fwbootmgr}'

_BLOCK_SEP_RE = re.compile(r"\r?\n[ \t]*\r?\n")
# Support both English and Chinese field names
_IDENTIFIER_RE = re.compile(r"^\s*(?:identifier|标识符)[ \t]+\{(.+?)\}", re.IGNORECASE | re.MULTILINE)
_DESCRIPTION_RE = re.compile(r"^\s*(?:description|描述)[ \t]+(.+)$", re.IGNORECASE | re.MULTILINE)


def parse_bcdedit(text: str) -> List[BootEntry]:
    """Parse ``bcdedit /enum firmware`` output.

    Each entry is a block of ``field value`` lines separated from the next
    by a blank line. Blocks lacking an identifier or a description are
    skipped, as is the firmware boot manager itself.
    """
    entries: List[BootEntry] = []
    for block in _BLOCK_SEP_RE.split(text or ''):
        mid = _IDENTIFIER_RE.search(block)
        mdesc = _DESCRIPTION_RE.search(block)
        if not (mid and mdesc):
            continue
        token = mid.group(1)
        if f'{{{token}}}'.lower() == FW_BOOT_MANAGER:
            continue
        entries.append(BootEntry(id=f'{{{token}}}', name=mdesc.group(1).strip()))
    return entries


class WindowsBootManager(BootProvider):
    system = 'Windows'
    platform_name = 'Windows (bcdedit)'
    requires_admin = True

    def __init__(self, broker: Optional[ElevationBroker] = None, bcdedit: str = 'bcdedit',
                 restart_tool: str = 'shutdown', timeout: float | None = None) -> None:
        # bcdedit cannot be elevated per call while keeping its output, so the
        # process itself is relaunched elevated (see elevate_if_needed).
        self.broker = broker if broker is not None else NullBroker()
        self.bcdedit = bcdedit
        self.restart_tool = restart_tool
        self.timeout = timeout

    @classmethod
    def from_config(cls, cfg: Dict) -> 'WindowsBootManager':
        windows = cfg.get('windows', {})
        return cls(
            bcdedit=windows.get('bcdedit', 'bcdedit'),
            restart_tool=windows.get('restart_tool', 'shutdown'),
            timeout=cfg.get('tools', {}).get('timeout'),
        )

    def _run_bcd(self, args: List[str], check: bool = False):
        return run(self.broker.wrap([self.bcdedit, *args]), check=check,
                   timeout=self.timeout, hide_window=True)

    def enumerate_entries(self) -> EntryList:
        try:
            cp = self._run_bcd(['/enum', 'firmware'], check=True)
        except BootToolError as e:
            _log.warning('could not list boot entries: %s', e)
            return EntryList(diagnostic=e)
        entries = parse_bcdedit(cp.stdout)
        if not entries:
            _log.info('%s /enum firmware listed no boot entries', self.bcdedit)
            return EntryList(diagnostic=ParseYieldedNoEntries(self.bcdedit))
        _log.debug('found %d firmware boot entries', len(entries))
        return EntryList(entries)

    def set_next_boot(self, entry: BootEntry, restart: bool = False) -> BootResult:
        try:
            self._run_bcd(['/set', FW_BOOT_MANAGER, 'bootsequence', entry.id], check=True)
        except ToolNonZeroExit as e:
            failure = PartialMutationFailure(e)
            _log.error('%s; restart not attempted', failure)
            return BootResult.failed(failure)
        except BootToolError as e:
            _log.error('could not set next boot to %s: %s', entry.id, e)
            return BootResult(False, f'Error: {e}')
        _log.info('boot sequence set to %s (%s)', entry.id, entry.name)

        if restart:
            self._restart()
        return BootResult(True, f'Successfully set next boot to: {entry.name}')

    def _restart(self) -> None:
        # Best effort: the boot sequence is already written.
        try:
            spawn([self.restart_tool, '/r', '/t', '0'], hide_window=True)
        except BootToolError as e:
            _log.warning('restart request failed: %s', e)

    def reboot_now(self) -> BootResult:
        try:
            run([self.restart_tool, '/r', '/t', '0'], check=True, timeout=self.timeout, hide_window=True)
        except BootToolError as e:
            return BootResult.failed(e)
        return BootResult(True, 'Restarting')
