from __future__ import annotations
import argparse
import json
from typing import List

from boot_selector.config import load_config, setup_logging
from boot_selector.errors import BootConfigError, UnsupportedPlatformError
from boot_selector.models import BootEntry
from boot_selector.platforms.base import BootProvider
from boot_selector.selector import select_provider


def format_entries(entries: List[BootEntry], output: str) -> str:
    if output == 'json':
        return json.dumps([
            {
                'id': e.id,
                'name': e.name,
                'is_current': e.is_current,
                'is_next': e.is_next,
            } for e in entries
        ], ensure_ascii=False, indent=2)
    # default: table-like text
    lines = ["ID\tCURRENT\tNEXT\tNAME"]
    for e in entries:
        lines.append(f"{e.id}\t{int(e.is_current)}\t{int(e.is_next)}\t{e.name}")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog='boot-selector', description='Choose the firmware boot entry for the next boot (Linux/Windows)')
    sub = p.add_subparsers(dest='cmd', required=False)

    p.add_argument('--cli', action='store_true', help='Run in CLI mode (no GUI)')
    p.add_argument('--config', default=None, help='Path to a YAML/JSON configuration file')
    p.add_argument('--log-level', default=None,
                   choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                   help='Override the configured log level')

    list_p = sub.add_parser('list', help='List firmware boot entries')
    list_p.add_argument('-o', '--output', choices=['text', 'json'], default='text')

    set_p = sub.add_parser('set', help='Set next boot entry (one-time)')
    set_p.add_argument('id', help='Entry ID (Linux: 0000..; Windows: {GUID})')
    set_p.add_argument('-r', '--restart', action='store_true', help='Restart immediately afterwards')

    sub.add_parser('reboot', help='Reboot immediately')

    return p


def load_settings(args: argparse.Namespace) -> dict:
    """Load the configuration named by ``args`` and set up logging."""
    cfg = load_config(getattr(args, 'config', None))
    if getattr(args, 'log_level', None):
        cfg.setdefault('logging', {})['level'] = args.log_level
    setup_logging(cfg.get('logging', {}))
    return cfg


def _set_next(mgr: BootProvider, entry_id: str, restart: bool) -> int:
    entries = mgr.enumerate_entries()
    if not entries.ok:
        print(f'Cannot list boot entries: {entries.diagnostic}')
        return 2
    entry = entries.find(entry_id)
    if entry is None:
        print(f'No boot entry with ID {entry_id}')
        return 2
    ok, msg = mgr.set_next_boot(entry, restart=restart)
    print(msg)
    return 0 if ok else 1


def run_cli(args: argparse.Namespace) -> int:
    try:
        cfg = load_settings(args)
        mgr = select_provider(cfg)
    except (BootConfigError, UnsupportedPlatformError) as e:
        print(e)
        return 2
    if args.cmd in (None, 'list'):
        entries = mgr.enumerate_entries()
        if not entries.ok:
            print(f'Cannot list boot entries: {entries.diagnostic}')
            return 2
        print(format_entries(entries, getattr(args, 'output', 'text')))
        return 0
    if args.cmd == 'set':
        return _set_next(mgr, args.id, args.restart)
    if args.cmd == 'reboot':
        ok, msg = mgr.reboot_now()
        print(msg)
        return 0 if ok else 1
    return 0
