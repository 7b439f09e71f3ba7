"""Exceptions raised by the chat relay."""


class NetworkError(RuntimeError):
    """A socket operation failed.

    ``errno`` holds the operating-system error number, or 0 when none applies.
    """

    def __init__(self, message, errno=0):
        super().__init__(message)
        self.message = message
        self.errno = errno

    def __str__(self):
        return self.message