import os
import logging

from scanner.errors import HandleError

logger = logging.getLogger(__name__)


class FileHandle:
    """Readable byte source identified by an integer file id.

    Subclasses implement ``read_into``: fill ``buffer`` from the current
    position and return the number of bytes placed in it, 0 at end of
    stream. The owner of a handle is responsible for closing it.
    """

    def __init__(self, file_id):
        self.file_id = file_id

    def read_into(self, buffer):
        raise NotImplementedError

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def __repr__(self):
        return f"<{type(self).__name__} file_id={self.file_id}>"


class StreamHandle(FileHandle):
    """Adapts an already-open binary stream (file object, BytesIO, ...)."""

    def __init__(self, file_id, stream, name=None):
        super().__init__(file_id)
        self.stream = stream
        self.name = name or getattr(stream, "name", None)

    def read_into(self, buffer):
        readinto = getattr(self.stream, "readinto", None)
        if readinto is not None:
            n = readinto(buffer)
        else:
            data = self.stream.read(len(buffer))
            n = len(data)
            buffer[:n] = data

        if n is None:
            raise HandleError(self.file_id, "non-blocking stream returned no data")
        return n

    def close(self):
        self.stream.close()


class LocalFileHandle(StreamHandle):
    """Handle over a file on the local filesystem, opened on first read."""

    def __init__(self, file_id, path):
        super().__init__(file_id, None, name=os.fspath(path))
        self.path = os.fspath(path)

    def open(self):
        if self.stream is None:
            self.stream = open(self.path, "rb")
            logger.debug("Opened %s as file %d", self.path, self.file_id)
        return self

    def read_into(self, buffer):
        if self.stream is None:
            self.open()
        return super().read_into(buffer)

    def close(self):
        if self.stream is not None:
            self.stream.close()
            self.stream = None
