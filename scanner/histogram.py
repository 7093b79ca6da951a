import math

BYTE_VALUES = 256


class ByteHistogram:
    """Occurrence counter for each of the 256 byte values.

    One histogram belongs to a single entropy computation; it is built up
    chunk by chunk and thrown away once the score is derived.
    """

    def __init__(self):
        self.counts = [0] * BYTE_VALUES
        self.total = 0

    def add(self, chunk):
        counts = self.counts
        # bytes, bytearray and memoryview all iterate as unsigned 0..255
        for byte in chunk:
            counts[byte] += 1
        self.total += len(chunk)

    def entropy(self):
        """Shannon entropy in bits per byte.

        An empty histogram has no distribution to measure and yields NaN,
        which callers receive as-is.
        """
        if self.total == 0:
            return float("nan")

        entropy = 0.0
        for count in self.counts:
            if count > 0:
                p = count / self.total
                entropy -= p * math.log2(p)

        return entropy
