from __future__ import annotations
import asyncio
import logging
from concurrent.futures import Future, ThreadPoolExecutor

from boot_selector.models import BootEntry, BootResult, EntryList
from boot_selector.platforms.base import BootProvider


_log = logging.getLogger(__name__)


class BootTaskRunner:
    """Run provider calls off the calling thread.

    Every call waits on its own native-tool process, so the worker threads
    share nothing. A call cannot be interrupted once started; a caller that
    loses interest just drops the future.
    """

    def __init__(self, provider: BootProvider, max_workers: int = 2) -> None:
        self.provider = provider
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='boot-selector')

    def submit_enumerate(self) -> 'Future[EntryList]':
        return self._pool.submit(self.provider.enumerate_entries)

    def submit_set_next(self, entry: BootEntry, restart: bool = False) -> 'Future[BootResult]':
        _log.debug('queueing next boot %s (restart=%s)', entry.id, restart)
        return self._pool.submit(self.provider.set_next_boot, entry, restart)

    async def enumerate_entries_async(self) -> EntryList:
        return await asyncio.wrap_future(self.submit_enumerate())

    async def set_next_boot_async(self, entry: BootEntry, restart: bool = False) -> BootResult:
        return await asyncio.wrap_future(self.submit_set_next(entry, restart))

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)

    def __enter__(self) -> 'BootTaskRunner':
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()
