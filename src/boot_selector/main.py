import sys

from PySide6.QtWidgets import QApplication, QMessageBox

from boot_selector.cli import build_parser, load_settings, run_cli
from boot_selector.errors import BootConfigError, UnsupportedPlatformError
from boot_selector.gui.app import BootSwitchApp
from boot_selector.platforms.common import elevate_if_needed
from boot_selector.selector import select_provider


def main():
    # Parse args; if CLI requested or subcommand present, run CLI.
    parser = build_parser()
    args, unknown = parser.parse_known_args()
    if getattr(args, 'cli', False) or args.cmd:
        sys.exit(run_cli(args))

    app = QApplication(sys.argv)
    try:
        cfg = load_settings(args)
        provider = select_provider(cfg)
    except (BootConfigError, UnsupportedPlatformError) as e:
        QMessageBox.critical(None, 'Boot Selector', str(e))
        sys.exit(2)

    # bcdedit needs an elevated process; relaunch through the elevation prompt
    if provider.requires_admin and elevate_if_needed(want_gui=True):
        # Elevated instance has been launched; exit current
        return

    w = BootSwitchApp(provider)
    w.show()
    sys.exit(app.exec())


if __name__ == '__main__':
    main()
