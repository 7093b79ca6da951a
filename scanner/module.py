import logging
from enum import Enum

import config
from scanner.calculator import EntropyCalculator, ErrorKind

logger = logging.getLogger(__name__)


class Status(Enum):
    OK = "ok"
    FAIL = "fail"


class EntropyModule:
    """File analysis module that posts each file's byte entropy to a blackboard.

    The host calls ``initialize`` once, ``run`` per file and ``finalize`` at
    shutdown. Every call reports a ``Status``; failures are logged with the
    file id and never raised back into the host.
    """

    def __init__(self, blackboard, chunk_size=None, cfg=None):
        self.cfg = cfg or config
        self.blackboard = blackboard
        if chunk_size is None:
            chunk_size = self.cfg.FILE_BUFFER_SIZE
        self.calculator = EntropyCalculator(chunk_size)

    @property
    def name(self):
        return self.cfg.MODULE_NAME

    def initialize(self, arguments=""):
        if arguments:
            logger.debug("%s takes no arguments; ignoring %r", self.name, arguments)
        return Status.OK

    def run(self, handle):
        status, _ = self.execute(handle)
        return status

    def execute(self, handle):
        """Score one file and return ``(status, outcome)``.

        The outcome belongs to this call only, so concurrent callers each
        get the score of the handle they passed in.
        """
        outcome = self.calculator.compute(handle)

        if outcome.error_kind is ErrorKind.INVALID_INPUT:
            if handle is None:
                logger.error("Entropy module passed NULL file pointer.")
            else:
                logger.error("%s - Invalid input: %s", self.name, outcome.message)
            return Status.FAIL, outcome
        if outcome.error_kind is ErrorKind.FRAMEWORK_FAILURE:
            logger.error("%s - Caught framework exception: %s", self.name, outcome.message)
            return Status.FAIL, outcome
        if outcome.error_kind is ErrorKind.IO_FAILURE:
            logger.error("%s - Caught exception: %s", self.name, outcome.message)
            return Status.FAIL, outcome

        if outcome.degenerate:
            logger.warning("File %s has no content; posting NaN entropy", outcome.file_id)

        self.blackboard.post(
            self.cfg.ENTROPY_ATTRIBUTE_TYPE,
            self.name,
            self.cfg.ENTROPY_LABEL,
            outcome.value,
            outcome.file_id,
        )
        logger.debug("File %s entropy %.4f over %d bytes", outcome.file_id, outcome.value, outcome.total_bytes)
        return Status.OK, outcome

    def finalize(self):
        return Status.OK
