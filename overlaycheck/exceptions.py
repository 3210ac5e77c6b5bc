class OverlayCheckError(Exception):
    pass


class ExtractionNotFound(OverlayCheckError):
    def __init__(self, message: str, selector: str | None = None):
        super().__init__(message)
        self.message = message
        self.selector = selector


class OpenFailed(OverlayCheckError):
    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class DevServerNotReady(OverlayCheckError):
    def __init__(self, message: str, url: str, original_error: Exception | None):
        super().__init__(message)
        self.message = message
        self.url = url
        self.original_error = original_error


class SnapshotMismatch(AssertionError):
    def __init__(self, message: str, diff: str, fields: list[str]):
        super().__init__(message)
        self.message = message
        self.diff = diff
        self.fields = fields


class SnapshotMissing(AssertionError):
    def __init__(self, message: str, location: str):
        super().__init__(message)
        self.message = message
        self.location = location


class UnexpectedOverlay(AssertionError):
    def __init__(self, message: str, snapshot: dict):
        super().__init__(message)
        self.message = message
        self.snapshot = snapshot
