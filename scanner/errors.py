class HandleError(Exception):
    """Read failure raised by the file handle layer rather than the OS."""

    def __init__(self, file_id, message):
        super().__init__(message)
        self.file_id = file_id
