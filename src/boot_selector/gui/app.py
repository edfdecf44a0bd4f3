from __future__ import annotations
import logging
from concurrent.futures import Future

from PySide6.QtCore import QObject, Qt, Signal
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QLabel, QListWidget, QListWidgetItem,
    QPushButton, QMessageBox, QHBoxLayout, QTextEdit
)

from boot_selector.config import LOG_FORMAT
from boot_selector.models import BootEntry, BootResult, EntryList
from boot_selector.platforms.base import BootProvider
from boot_selector.tasks import BootTaskRunner


_log = logging.getLogger(__name__)


class _Bridge(QObject):
    """Carries results from worker threads to the GUI thread."""
    entries_ready = Signal(object)
    result_ready = Signal(object)
    log_record = Signal(str)


class _PaneHandler(logging.Handler):
    def __init__(self, bridge: _Bridge) -> None:
        super().__init__(logging.INFO)
        self.bridge = bridge
        self.setFormatter(logging.Formatter(LOG_FORMAT))

    def emit(self, record: logging.LogRecord) -> None:
        self.bridge.log_record.emit(self.format(record))


class BootSwitchApp(QWidget):
    def __init__(self, provider: BootProvider):
        super().__init__()
        self.setWindowTitle('Boot Selector')
        self.resize(640, 420)

        self.provider = provider
        self.runner = BootTaskRunner(provider)
        self.bridge = _Bridge(self)
        self.bridge.entries_ready.connect(self._show_entries)
        self.bridge.result_ready.connect(self._show_result)

        self._build_ui()
        self.bridge.log_record.connect(self.log.append)
        self._log_handler = _PaneHandler(self.bridge)
        logging.getLogger('boot_selector').addHandler(self._log_handler)
        self.refresh()

    def _build_ui(self):
        layout = QVBoxLayout(self)
        layout.addWidget(QLabel(f'Platform: {self.provider.platform_name}'))

        self.list = QListWidget()
        layout.addWidget(self.list)

        btn_row = QHBoxLayout()
        self.btn_refresh = QPushButton('Refresh')
        self.btn_apply = QPushButton('Set next boot')
        self.btn_restart = QPushButton('Set and restart')
        btn_row.addWidget(self.btn_refresh)
        btn_row.addWidget(self.btn_apply)
        btn_row.addWidget(self.btn_restart)
        layout.addLayout(btn_row)

        layout.addWidget(QLabel('Log'))
        self.log = QTextEdit()
        self.log.setReadOnly(True)
        layout.addWidget(self.log, 1)

        self.btn_refresh.clicked.connect(self.refresh)
        self.btn_apply.clicked.connect(lambda: self.apply_selection(restart=False))
        self.btn_restart.clicked.connect(lambda: self.apply_selection(restart=True))

    def log_line(self, text: str):
        self.log.append(text)

    def _set_busy(self, busy: bool):
        for w in (self.list, self.btn_refresh, self.btn_apply, self.btn_restart):
            w.setEnabled(not busy)

    def refresh(self):
        self._set_busy(True)
        self.list.clear()
        fut = self.runner.submit_enumerate()
        fut.add_done_callback(lambda f: self._deliver(f, self.bridge.entries_ready))

    def _deliver(self, fut: Future, signal) -> None:
        # Runs on the worker thread; the signal is queued to the GUI thread.
        exc = fut.exception()
        if exc is not None:
            _log.error('boot task failed: %s', exc)
            signal.emit(EntryList() if signal is self.bridge.entries_ready else BootResult.failed(exc))
            return
        signal.emit(fut.result())

    def _show_entries(self, entries: EntryList):
        for e in entries:
            item = QListWidgetItem(f"{e.display_name}  [{e.id}]" + ("  (Next)" if e.is_next else ""))
            item.setData(Qt.UserRole, e)
            self.list.addItem(item)
            if e.is_current:
                self.list.setCurrentItem(item)
        if self.list.count() and self.list.currentItem() is None:
            self.list.setCurrentRow(0)
        if not entries.ok:
            self.log_line(f'Error: {entries.diagnostic}')
        self.log_line(f'Found {self.list.count()} boot entries')
        self._set_busy(False)

    def apply_selection(self, restart: bool = False):
        item = self.list.currentItem()
        if not item:
            QMessageBox.information(self, 'Boot Selector', 'Select a boot entry first')
            return
        entry: BootEntry = item.data(Qt.UserRole)
        if restart:
            ret = QMessageBox.question(self, 'Confirm restart',
                                       f'Restart now into {entry.name}? Save your work first.')
            if ret != QMessageBox.Yes:
                return
        self._set_busy(True)
        fut = self.runner.submit_set_next(entry, restart)
        fut.add_done_callback(lambda f: self._deliver(f, self.bridge.result_ready))

    def _show_result(self, result: BootResult):
        self._set_busy(False)
        if result.success:
            self.log_line(result.message)
            self.refresh()
        else:
            QMessageBox.critical(self, 'Failed', result.message)
            self.log_line('Error: ' + result.message)

    def closeEvent(self, event):
        logging.getLogger('boot_selector').removeHandler(self._log_handler)
        self.runner.shutdown(wait=False)
        super().closeEvent(event)
