from __future__ import annotations
import logging
import os
import platform
import shutil
import subprocess
import sys
from abc import ABC, abstractmethod
from typing import List, Sequence

from boot_selector.errors import BootConfigError, ToolLaunchFailure, ToolNonZeroExit, ToolTimeout


_log = logging.getLogger(__name__)


def is_admin() -> bool:
    system = platform.system()
    try:
        if system == 'Windows':
            import ctypes
            return ctypes.windll.shell32.IsUserAnAdmin() != 0
        else:
            return os.geteuid() == 0
    except (AttributeError, OSError):
        return False


def which(cmd: str) -> str | None:
    return shutil.which(cmd)


def current_platform() -> str:
    return platform.system()


def _creationflags(hide_window: bool) -> int:
    # 在 Windows 上隐藏窗口
    if hide_window and platform.system() == 'Windows':
        return subprocess.CREATE_NO_WINDOW
    return 0


def _encoding() -> str | None:
    # bcdedit writes in the OEM code page, not the ANSI one
    return 'oem' if platform.system() == 'Windows' else None


def run(cmd: List[str], check: bool = False, timeout: float | None = None, hide_window: bool = False) -> subprocess.CompletedProcess:
    """Run a native tool and capture its output as text.

    Bytes that do not decode in the tool's encoding are replaced, so
    localized output never turns into a decoding error.

    Raises ``ToolLaunchFailure`` when the process cannot be spawned,
    ``ToolTimeout`` when ``timeout`` expires, and with ``check`` set,
    ``ToolNonZeroExit`` on a non-zero exit status.
    """
    _log.debug('running %s', subprocess.list2cmdline(cmd))
    try:
        cp = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            encoding=_encoding(),
            errors='replace',
            timeout=timeout,
            creationflags=_creationflags(hide_window),
        )
    except subprocess.TimeoutExpired:
        raise ToolTimeout(cmd, timeout)
    except OSError as e:
        raise ToolLaunchFailure(cmd, e)
    _log.debug('%s exited with %d', cmd[0], cp.returncode)
    if check and cp.returncode != 0:
        raise ToolNonZeroExit(cmd, cp.returncode, cp.stderr or cp.stdout)
    return cp


def spawn(cmd: List[str], hide_window: bool = False) -> subprocess.Popen:
    """Start a process without waiting for it (fire-and-forget)."""
    _log.debug('spawning %s', subprocess.list2cmdline(cmd))
    try:
        return subprocess.Popen(
            cmd,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            creationflags=_creationflags(hide_window),
        )
    except OSError as e:
        raise ToolLaunchFailure(cmd, e)


class ElevationBroker(ABC):
    """Runs a command through an OS facility that grants elevated rights."""

    name = 'none'

    @abstractmethod
    def wrap(self, cmd: Sequence[str]) -> List[str]:
        ...


class NullBroker(ElevationBroker):
    """Pass commands through unchanged (already elevated, or under test)."""

    def wrap(self, cmd: Sequence[str]) -> List[str]:
        return list(cmd)


class CommandBroker(ElevationBroker):
    def __init__(self, prefix: Sequence[str]) -> None:
        self.prefix = list(prefix)
        self.name = self.prefix[0]

    def wrap(self, cmd: Sequence[str]) -> List[str]:
        return [*self.prefix, *cmd]

    def __repr__(self) -> str:
        return f'CommandBroker({self.prefix!r})'


_BROKERS = {
    'pkexec': ['pkexec'],
    'sudo': ['sudo', '-n'],
}


def make_broker(name: str | None) -> ElevationBroker:
    if not name or name == 'none':
        return NullBroker()
    if name not in _BROKERS:
        raise BootConfigError(f'Unknown elevation broker: {name} (expected one of: none, {", ".join(_BROKERS)})')
    return CommandBroker(_BROKERS[name])


def _quote_win_args(args: List[str]) -> str:
    return subprocess.list2cmdline(args)


def elevate_if_needed(want_gui: bool = True) -> bool:
    """Ensure the process runs with admin/root.

    Returns True if a privileged re-launch was initiated and current process should exit.
    Returns False if already elevated or elevation could not be initiated.
    """
    if is_admin():
        return False

    system = current_platform()
    exe = sys.executable or sys.argv[0]

    # When not frozen (PyInstaller), relaunch via `-m boot_selector.main`
    # and keep the original CLI args.
    if getattr(sys, 'frozen', False):
        relaunch_args = sys.argv[1:]
    else:
        relaunch_args = ['-m', 'boot_selector.main', *sys.argv[1:]]

    if system == 'Windows':
        try:
            import ctypes
            ShellExecuteW = ctypes.windll.shell32.ShellExecuteW
            cmdline = _quote_win_args(relaunch_args)
            ret = ShellExecuteW(None, "runas", exe, cmdline, None, 1)
        except (AttributeError, OSError) as e:
            _log.warning('elevated relaunch failed: %s', e)
            return False
        if int(ret) <= 32:
            _log.warning('elevated relaunch refused (ShellExecuteW returned %d)', int(ret))
            return False
        return True

    # Linux / others: pkexec gives a GUI prompt. Fall back to sudo in terminal scenarios.
    pk = which('pkexec')
    if pk and want_gui:
        env_args = []
        for key in ('DISPLAY', 'XAUTHORITY', 'WAYLAND_DISPLAY', 'XDG_RUNTIME_DIR'):
            val = os.environ.get(key)
            if val:
                env_args += [f'{key}={val}']
        cmd = [pk, 'env', *env_args, exe, *relaunch_args]
        try:
            subprocess.Popen(cmd)
            return True
        except OSError as e:
            _log.warning('pkexec relaunch failed: %s', e)

    sudo = which('sudo')
    if sudo and not want_gui:
        try:
            os.execvp(sudo, [sudo, exe, *relaunch_args])
        except OSError as e:
            _log.warning('sudo relaunch failed: %s', e)
    return False
