import math
import logging
import threading
from collections import deque
from datetime import datetime

import config

logger = logging.getLogger(__name__)


class BlackboardAttribute:
    def __init__(self, kind, source, label, value, file_id):
        now = datetime.now()
        self.timestamp = now.isoformat()
        self.unix_ts = now.timestamp()
        self.kind = kind
        self.source = source
        self.label = label
        self.value = value
        self.file_id = file_id

    def to_dict(self):
        value = self.value
        # NaN is not valid JSON
        if isinstance(value, float) and math.isnan(value):
            value = None
        return {
            "timestamp": self.timestamp,
            "unix_ts": self.unix_ts,
            "kind": self.kind,
            "source": self.source,
            "label": self.label,
            "value": value,
            "file_id": self.file_id,
        }


class Blackboard:
    """Attribute store that modules post results to, keyed by file id."""

    def __init__(self, max_attributes=None):
        self.attributes = deque(maxlen=max_attributes or config.MAX_ATTRIBUTES)
        self._lock = threading.Lock()
        self._subscribers = []

    def add_attribute(self, attribute):
        with self._lock:
            self.attributes.append(attribute)
        for callback in list(self._subscribers):
            try:
                callback(attribute)
            except Exception as e:
                logger.debug("Subscriber callback failed: %s", e)
        return attribute

    def post(self, kind, source, label, value, file_id):
        return self.add_attribute(BlackboardAttribute(kind, source, label, value, file_id))

    def subscribe(self, callback):
        with self._lock:
            self._subscribers.append(callback)

    def get_for_file(self, file_id, kind=None):
        with self._lock:
            return [
                a for a in self.attributes
                if a.file_id == file_id and (kind is None or a.kind == kind)
            ]

    def get_all(self):
        with self._lock:
            return [a.to_dict() for a in self.attributes]

    def get_recent(self, count=50):
        with self._lock:
            recent = list(self.attributes)[-count:]
            return [a.to_dict() for a in recent]

    def __len__(self):
        with self._lock:
            return len(self.attributes)

    def reset(self):
        with self._lock:
            self.attributes.clear()
        logger.info("Blackboard reset")
