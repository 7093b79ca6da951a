import os
import logging
import threading
from concurrent.futures import ThreadPoolExecutor

import config
from scanner.calculator import EntropyOutcome, ErrorKind
from scanner.handles import LocalFileHandle
from scanner.module import Status

logger = logging.getLogger(__name__)


class FilePipeline:
    def __init__(self, module, cfg=None):
        self.cfg = cfg or config
        self.module = module
        self.blackboard = module.blackboard
        self.files = {}
        self.failed = set()
        # latest outcome per file id; the blackboard is bounded and may evict
        self.outcomes = {}
        self.running = False
        self._ids = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def start(self, arguments=""):
        status = self.module.initialize(arguments)
        self.running = status is Status.OK
        if not self.running:
            logger.error("%s failed to initialize", self.module.name)
        return self.running

    def stop(self):
        status = self.module.finalize()
        self.running = False
        if status is not Status.OK:
            logger.error("%s failed to finalize", self.module.name)
        return status

    def is_running(self):
        return self.running

    def _register(self, path):
        with self._lock:
            file_id = self._ids.get(path)
            if file_id is None:
                file_id = self._next_id
                self._next_id += 1
                self._ids[path] = file_id
                self.files[file_id] = path
        return file_id

    def _record(self, file_id, status, outcome):
        with self._lock:
            self.outcomes[file_id] = outcome
            if status is Status.OK:
                self.failed.discard(file_id)
            else:
                self.failed.add(file_id)

    def process_file(self, path):
        path = os.path.abspath(path)
        file_id = self._register(path)

        handle = LocalFileHandle(file_id, path)
        try:
            handle.open()
        except OSError as e:
            logger.error("Could not open %s (file %d): %s", path, file_id, e)
            outcome = EntropyOutcome.failure(ErrorKind.IO_FAILURE, f"open failed for file {file_id}: {e}", file_id)
            self._record(file_id, Status.FAIL, outcome)
            return Status.FAIL

        with handle:
            status, outcome = self.module.execute(handle)

        self._record(file_id, status, outcome)
        return status

    def discover(self, root, recursive=False):
        if recursive:
            for dirpath, _, filenames in os.walk(root):
                for name in sorted(filenames):
                    path = os.path.join(dirpath, name)
                    if os.path.isfile(path):
                        yield path
            return

        for entry in sorted(os.scandir(root), key=lambda e: e.name):
            if entry.is_file():
                yield entry.path

    def _expand(self, paths, recursive):
        for path in paths:
            if os.path.isdir(path):
                yield from self.discover(path, recursive)
            else:
                yield path

    def process_paths(self, paths, recursive=False, workers=None):
        targets = list(self._expand(paths, recursive))
        workers = workers or self.cfg.SCAN_WORKERS

        if workers > 1 and len(targets) > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                statuses = list(pool.map(self.process_file, targets))
        else:
            statuses = [self.process_file(p) for p in targets]

        succeeded = sum(1 for s in statuses if s is Status.OK)
        summary = {
            "processed": len(statuses),
            "succeeded": succeeded,
            "failed": len(statuses) - succeeded,
        }
        logger.info(
            "Scan complete: %d processed, %d failed",
            summary["processed"], summary["failed"],
        )
        return summary

    def results(self):
        with self._lock:
            files = dict(self.files)
            outcomes = dict(self.outcomes)
        rows = []
        for file_id, path in sorted(files.items()):
            outcome = outcomes.get(file_id)
            ok = outcome is not None and outcome.ok
            rows.append({
                "file_id": file_id,
                "path": path,
                "entropy": outcome.value if ok else None,
                "failed": not ok,
            })
        return rows
