from __future__ import annotations
import logging
import re
import shlex
from typing import Dict, List, Optional

from .base import BootProvider
from .common import ElevationBroker, make_broker, run
from boot_selector.errors import BootToolError, ParseYieldedNoEntries
from boot_selector.models import BootEntry, BootResult, EntryList


_log = logging.getLogger(__name__)

_BOOT_ENTRY_RE = re.compile(r"^[ \t]*Boot([0-9A-Fa-f]{4})\*?[ \t]+(.+?)(?:\t|$)", re.MULTILINE)
_BOOT_CURRENT_RE = re.compile(r"BootCurrent:\s*([0-9A-Fa-f]{4})")
_BOOT_NEXT_RE = re.compile(r"BootNext:\s*([0-9A-Fa-f]{4})")


def parse_efibootmgr(text: str) -> List[BootEntry]:
    """Parse the report printed by ``efibootmgr`` into boot entries.

    The entries keep the order of the ``Boot####`` lines, which is the
    order efibootmgr walks the firmware variables in. ``BootCurrent`` and
    ``BootNext`` are matched against the entry ids ignoring case.
    """
    text = text or ''
    current = _BOOT_CURRENT_RE.search(text)
    next_ = _BOOT_NEXT_RE.search(text)
    cur = current.group(1).lower() if current else None
    nxt = next_.group(1).lower() if next_ else None

    entries: List[BootEntry] = []
    seen_current = seen_next = False
    for m in _BOOT_ENTRY_RE.finditer(text):
        bid, name = m.group(1), m.group(2).strip()
        is_current = not seen_current and bid.lower() == cur
        is_next = not seen_next and bid.lower() == nxt
        seen_current = seen_current or is_current
        seen_next = seen_next or is_next
        entries.append(BootEntry(id=bid, name=name, is_current=is_current, is_next=is_next))
    return entries


class LinuxBootManager(BootProvider):
    system = 'Linux'
    platform_name = 'Linux (efibootmgr)'

    def __init__(self, broker: Optional[ElevationBroker] = None, efibootmgr: str = 'efibootmgr',
                 reboot_command: str = 'reboot', timeout: float | None = None) -> None:
        self.broker = broker if broker is not None else make_broker('pkexec')
        self.efibootmgr = efibootmgr
        self.reboot_command = reboot_command
        self.timeout = timeout

    @classmethod
    def from_config(cls, cfg: Dict) -> 'LinuxBootManager':
        linux = cfg.get('linux', {})
        return cls(
            broker=make_broker(linux.get('elevation', 'pkexec')),
            efibootmgr=linux.get('efibootmgr', 'efibootmgr'),
            reboot_command=linux.get('reboot_command', 'reboot'),
            timeout=cfg.get('tools', {}).get('timeout'),
        )

    def enumerate_entries(self) -> EntryList:
        try:
            cp = run([self.efibootmgr], check=True, timeout=self.timeout)
        except BootToolError as e:
            _log.warning('could not list boot entries: %s', e)
            return EntryList(diagnostic=e)
        if cp.stderr:
            _log.debug('%s stderr: %s', self.efibootmgr, cp.stderr.strip())
        entries = parse_efibootmgr(cp.stdout)
        if not entries:
            _log.info('%s output contained no boot entries', self.efibootmgr)
            return EntryList(diagnostic=ParseYieldedNoEntries(self.efibootmgr))
        _log.debug('found %d boot entries', len(entries))
        return EntryList(entries)

    def _shell(self, command: str) -> List[str]:
        return self.broker.wrap(['sh', '-c', command])

    def set_next_boot(self, entry: BootEntry, restart: bool = False) -> BootResult:
        command = f'{self.efibootmgr} --bootnext {shlex.quote(entry.id)}'
        if restart:
            command += f' && {self.reboot_command}'
        try:
            cp = run(self._shell(command), timeout=self.timeout)
        except BootToolError as e:
            _log.error('could not set next boot to %s: %s', entry.id, e)
            return BootResult(False, f'Error: {e}')
        if cp.returncode == 0:
            _log.info('next boot set to %s (%s)', entry.id, entry.name)
            return BootResult(True, f'Successfully set next boot to: {entry.name}')
        error = (cp.stderr or '').strip()
        _log.error('%s --bootnext %s failed with exit code %d: %s',
                   self.efibootmgr, entry.id, cp.returncode, error)
        return BootResult(False, f'Failed: {error}')

    def reboot_now(self) -> BootResult:
        try:
            cp = run(self._shell(self.reboot_command), timeout=self.timeout)
        except BootToolError as e:
            return BootResult.failed(e)
        if cp.returncode != 0:
            return BootResult(False, f'Failed: {(cp.stderr or "").strip()}')
        return BootResult(True, 'Restarting')
