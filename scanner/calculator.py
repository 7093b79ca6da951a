import math
import logging
from enum import Enum

import config
from scanner.errors import HandleError
from scanner.histogram import ByteHistogram

logger = logging.getLogger(__name__)


class ErrorKind(Enum):
    INVALID_INPUT = "invalid_input"
    IO_FAILURE = "io_failure"
    FRAMEWORK_FAILURE = "framework_failure"


class EntropyOutcome:
    def __init__(self, value=None, error_kind=None, message="", file_id=None, total_bytes=0):
        self.value = value
        self.error_kind = error_kind
        self.message = message
        self.file_id = file_id
        self.total_bytes = total_bytes

    @classmethod
    def success(cls, value, file_id, total_bytes):
        return cls(value=value, file_id=file_id, total_bytes=total_bytes)

    @classmethod
    def failure(cls, error_kind, message, file_id=None):
        return cls(error_kind=error_kind, message=message, file_id=file_id)

    @property
    def ok(self):
        return self.error_kind is None

    @property
    def degenerate(self):
        return self.ok and math.isnan(self.value)

    def to_dict(self):
        value = self.value
        if value is not None and math.isnan(value):
            value = None
        return {
            "ok": self.ok,
            "file_id": self.file_id,
            "entropy": value,
            "total_bytes": self.total_bytes,
            "error": self.error_kind.value if self.error_kind else None,
            "message": self.message,
        }

    def __repr__(self):
        if self.ok:
            return f"<EntropyOutcome file_id={self.file_id} entropy={self.value}>"
        return f"<EntropyOutcome file_id={self.file_id} error={self.error_kind.value}>"


class EntropyCalculator:
    def __init__(self, chunk_size=None):
        if chunk_size is None:
            chunk_size = config.FILE_BUFFER_SIZE
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1 byte")
        self.chunk_size = chunk_size

    def compute(self, handle):
        if handle is None:
            return EntropyOutcome.failure(ErrorKind.INVALID_INPUT, "no file handle supplied")
        if not callable(getattr(handle, "read_into", None)):
            return EntropyOutcome.failure(
                ErrorKind.INVALID_INPUT,
                f"object of type {type(handle).__name__} is not a readable file handle",
                getattr(handle, "file_id", None),
            )

        file_id = getattr(handle, "file_id", None)
        try:
            histogram = self._accumulate(handle)
        except HandleError as e:
            return EntropyOutcome.failure(
                ErrorKind.FRAMEWORK_FAILURE,
                f"read failed for file {file_id}: {e}",
                file_id,
            )
        except Exception as e:
            return EntropyOutcome.failure(
                ErrorKind.IO_FAILURE,
                f"read failed for file {file_id}: {type(e).__name__}: {e}",
                file_id,
            )

        entropy = histogram.entropy()
        if math.isnan(entropy):
            logger.debug("File %s is empty; entropy is undefined", file_id)
        return EntropyOutcome.success(entropy, file_id, histogram.total)

    def _accumulate(self, handle):
        histogram = ByteHistogram()
        buffer = bytearray(self.chunk_size)
        blank = bytes(self.chunk_size)
        while True:
            # a short final read must never see bytes left over from the previous chunk
            buffer[:] = blank
            n = handle.read_into(buffer)
            if not n or n < 0:
                break
            histogram.add(memoryview(buffer)[:n])
        return histogram
