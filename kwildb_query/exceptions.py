class ConnectionNotFound(LookupError):
    """Raised when no connection is registered under the requested name."""
    def __init__(self, name):
        super().__init__(f'Could not find connection "{name}"')
        self.name = name


class ExecutionError(Exception):
    """The connector answered with an error message instead of a result."""
    def __init__(self, message):
        super().__init__(message)
        self.message = message
