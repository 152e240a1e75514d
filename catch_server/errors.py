"""Error types surfaced by the API. Each one knows its HTTP status."""


class CatchServerError(Exception):
    status_code = 500

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self):
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class InvalidInputError(CatchServerError):
    status_code = 400


class BackingStoreError(CatchServerError):
    """Players sheet unreachable, auth failure, or tab not found."""


class FeedUnavailableError(CatchServerError):
    """Catch CSV unreachable or returned a non-success status."""


class EmptySequenceError(CatchServerError):
    pass


class ResourceNotFoundError(CatchServerError):
    pass
