from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path

from watchdog.observers import Observer

from ..config import Settings
from ..models import DecodeError
from ..reader import read_song
from ..scanner import LibraryScanner
from ..watchdog_handler import WatchHandler
from .output import as_json, summary

logger = logging.getLogger(__name__)


class LibraryWatcher:
    """Decodes every NSF file under the library roots, then keeps decoding as files change."""

    def __init__(
        self,
        settings: Settings,
        *,
        json_output: bool = False,
        emit: Callable[[str], None] = print,
    ) -> None:
        self.settings = settings
        self.scanner = LibraryScanner(settings.library)
        self.json_output = json_output
        self.emit = emit
        self.queue: asyncio.Queue[Path] = asyncio.Queue()
        self.observer: Observer | None = None

    async def run(self) -> None:
        logger.debug("Starting watcher")
        for path in self.scanner.iter_files():
            await self.queue.put(path)
        loop = asyncio.get_running_loop()
        worker = asyncio.create_task(self._worker())
        try:
            await loop.run_in_executor(None, self._bootstrap_watchdog, loop)
            while True:
                await asyncio.sleep(3600)
        except (asyncio.CancelledError, KeyboardInterrupt):
            logger.debug("Watcher stopping")
        finally:
            if self.observer:
                self.observer.stop()
                self.observer.join()
            worker.cancel()
            await asyncio.gather(worker, return_exceptions=True)

    def _bootstrap_watchdog(self, loop: asyncio.AbstractEventLoop) -> None:
        handler = WatchHandler(self.queue, self.scanner, loop=loop)
        observer = Observer()
        for root in self.settings.library.roots:
            if not root.is_dir():
                logger.warning("Not watching missing library root %s", root)
                continue
            observer.schedule(handler, str(root), recursive=True)
        observer.start()
        self.observer = observer

    async def _worker(self) -> None:
        while True:
            path = await self.queue.get()
            try:
                self.process(path)
            finally:
                self.queue.task_done()

    def process(self, path: Path) -> bool:
        try:
            meta = read_song(path, self.settings.decoder)
        except DecodeError as exc:
            logger.warning("Skipping %s", exc)
            return False
        self.emit(as_json(path, meta) if self.json_output else summary(path, meta))
        return True


def run(settings: Settings, *, json_output: bool = False) -> None:
    watcher = LibraryWatcher(settings, json_output=json_output)
    try:
        asyncio.run(watcher.run())
    except KeyboardInterrupt:
        logger.info("Stopped watching")
