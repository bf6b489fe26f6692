class TextFileOpenError(OSError):
    """Raised when a stream cannot be opened or its BOM cannot be read. Subclass of OSError."""
    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot open text file '{path}': {reason}.")


class RemoteFetchError(OSError):
    """Raised when a remote resource cannot be downloaded. Subclass of OSError."""
    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Cannot fetch '{url}': {reason}.")
