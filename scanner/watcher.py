import os
import logging

from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler

logger = logging.getLogger(__name__)


class RescanEventHandler(FileSystemEventHandler):
    def __init__(self, pipeline):
        super().__init__()
        self.pipeline = pipeline

    def on_created(self, event):
        if event.is_directory:
            return
        self._process(event.src_path)

    def on_modified(self, event):
        if event.is_directory:
            return
        self._process(event.src_path)

    def on_moved(self, event):
        if event.is_directory:
            return
        self._process(event.dest_path)

    def _process(self, path):
        if not os.path.isfile(path):
            return
        logger.debug("Change detected: %s", path)
        self.pipeline.process_file(path)


class DirectoryWatcher:
    def __init__(self, target_dir, handler, recursive=False):
        self.target_dir = target_dir
        self.handler = handler
        self.recursive = recursive
        self.observer = Observer()

    def start(self):
        self.observer.schedule(self.handler, self.target_dir, recursive=self.recursive)
        self.observer.start()
        logger.info("Directory watcher started on %s", self.target_dir)

    def stop(self):
        self.observer.stop()
        self.observer.join(timeout=5)
        logger.info("Directory watcher stopped")

    def is_alive(self):
        return self.observer.is_alive()
