# tests/__init__.py - shared samples and helpers for the boot-selector tests.
import subprocess

from boot_selector.models import BootEntry, BootResult, EntryList
from boot_selector.platforms.base import BootProvider

__all__ = [
    "EFIBOOTMGR_OUTPUT",
    "EFIBOOTMGR_IDS",
    "BCDEDIT_OUTPUT",
    "completed",
    "FakeProvider",
    "sample_entries",
]

# efibootmgr lists entries in firmware variable order, not numerically.
EFIBOOTMGR_OUTPUT = (
    "BootCurrent: 0003\n"
    "Timeout: 1 seconds\n"
    "BootOrder: 0003,0000,0001,0002\n"
    "Boot0003* ubuntu\tHD(1,GPT,0e4f9a2c-6b0b-4c21-9c1e-0f5d3d7e9b11,0x800,0x100000)/File(\\EFI\\ubuntu\\shimx64.efi)\n"
    "Boot0000* Windows Boot Manager\tHD(1,GPT,0e4f9a2c-6b0b-4c21-9c1e-0f5d3d7e9b11,0x800,0x100000)/File(\\EFI\\Microsoft\\Boot\\bootmgfw.efi)\n"
    "Boot0001  UEFI: PXE IPv4 Intel(R) Ethernet Connection\n"
    "Boot0002* UEFI: Built-in EFI Shell\n"
)

EFIBOOTMGR_IDS = ["0003", "0000", "0001", "0002"]

BCDEDIT_OUTPUT = """\
Firmware Boot Manager
---------------------
identifier              {fwbootmgr}
displayorder            {bootmgr}
                        {a5a30fa2-3d06-11e9-9a3c-806e6f6e6963}
                        {a5a30fa3-3d06-11e9-9a3c-806e6f6e6963}
timeout                 0

Windows Boot Manager
--------------------
identifier              {bootmgr}
device                  partition=\\Device\\HarddiskVolume1
path                    \\EFI\\Microsoft\\Boot\\bootmgfw.efi
description             Windows Boot Manager
locale                  en-US

Firmware Application (101fffff)
-------------------------------
identifier              {a5a30fa2-3d06-11e9-9a3c-806e6f6e6963}
description             ubuntu

Firmware Application (101fffff)
-------------------------------
identifier              {a5a30fa3-3d06-11e9-9a3c-806e6f6e6963}
device                  partition=\\Device\\HarddiskVolume2
"""


def completed(args=None, returncode=0, stdout="", stderr=""):
    """Build a ``CompletedProcess`` as returned by the process helpers."""
    return subprocess.CompletedProcess(args or [], returncode, stdout, stderr)


class FakeProvider(BootProvider):
    """In-memory provider recording the calls made to it."""

    system = "Linux"
    platform_name = "Fake (test)"

    def __init__(self, entries=(), result=None, diagnostic=None):
        self.entries = list(entries)
        self.result = result or BootResult(True, "ok")
        self.diagnostic = diagnostic
        self.calls = []

    def enumerate_entries(self):
        self.calls.append(("enumerate",))
        return EntryList(self.entries, diagnostic=self.diagnostic)

    def set_next_boot(self, entry, restart=False):
        self.calls.append(("set_next", entry.id, restart))
        return self.result

    def reboot_now(self):
        self.calls.append(("reboot",))
        return self.result


def sample_entries():
    return [
        BootEntry(id="0003", name="ubuntu", is_current=True),
        BootEntry(id="0000", name="Windows Boot Manager"),
    ]

