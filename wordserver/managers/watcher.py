from __future__ import annotations
import logging
import os
import queue
import threading
from typing import Callable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .templates import TemplateSet, TemplateStore

logger = logging.getLogger(__name__)

_STOP = object()

class _QueueingHandler(FileSystemEventHandler):
    """Forwards change events onto the watcher's queue; never reloads itself."""

    def __init__(self, watcher: 'TemplateWatcher'):
        super().__init__()
        self.watcher = watcher

    def on_created(self, event: FileSystemEvent):
        if not event.is_directory:
            self.watcher.notify(event.src_path)

    def on_modified(self, event: FileSystemEvent):
        if not event.is_directory:
            self.watcher.notify(event.src_path)

    def on_moved(self, event: FileSystemEvent):
        # editors commonly save through a rename into place
        if not event.is_directory:
            self.watcher.notify(event.dest_path)

class TemplateWatcher:
    def __init__(
        self,
        store: TemplateStore,
        directory: Optional[str] = None,
        on_reload: Optional[Callable[[TemplateSet], None]] = None,
    ):
        self.store = store
        self.directory = directory or store.directory
        self.on_reload = on_reload
        self.active = False
        self._events: 'queue.Queue[object]' = queue.Queue()
        self._observer: Optional[Observer] = None
        self._consumer: Optional[threading.Thread] = None

    def start(self) -> bool:
        """Start the consumer thread and the directory watch.

        Returns False when the watch could not be established; the store
        keeps whatever it already holds and the watcher is not retried.
        """
        if not os.path.isdir(self.directory):
            logger.error("Unable to watch template folder %s: not a directory", self.directory)
            return False
        observer = Observer()
        try:
            observer.schedule(_QueueingHandler(self), self.directory, recursive=False)
            observer.start()
        except OSError as e:
            logger.error("Unable to watch template folder %s: %s", self.directory, e)
            return False
        self._observer = observer
        self._consumer = threading.Thread(target=self._run, name='template-watcher', daemon=True)
        self._consumer.start()
        self.active = True
        logger.info("Watching %s for template changes", self.directory)
        return True

    def notify(self, path: str = '') -> None:
        self._events.put(path)

    def wait_idle(self) -> None:
        """Block until every queued event has been processed."""
        self._events.join()

    def stop(self) -> None:
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None
        if self._consumer is not None:
            self._events.put(_STOP)
            self._consumer.join(timeout=5)
            self._consumer = None
        self.active = False

    def _run(self) -> None:
        while True:
            item = self._events.get()
            if item is _STOP:
                self._events.task_done()
                return
            # fold anything that piled up behind this event into one reload
            batch = 1
            stop = False
            while True:
                try:
                    extra = self._events.get_nowait()
                except queue.Empty:
                    break
                batch += 1
                if extra is _STOP:
                    stop = True
                    break
            try:
                self._reload(item)
            finally:
                for _ in range(batch):
                    self._events.task_done()
            if stop:
                return

    def _reload(self, path: object) -> None:
        logger.debug("Template change detected: %s", path)
        template_set = self.store.reload()
        if template_set is None or self.on_reload is None:
            return
        try:
            self.on_reload(template_set)
        except Exception:
            logger.exception("Template reload callback failed")
