"""
Exception types shared across the service.

Two kinds of failure reach the error boundary:

    ClientError      the request itself is at fault (bad JSON, bad id).
                     Rendered with its own status code, usually 400.
    anything else    an unexpected failure inside the service.
                     Rendered as a uniform 500 with no details.

"Not found" is not an exception here: the store returns None/False and the
handler turns that into a 404.
"""


class ClientError(Exception):
    """
    A fault in the client's request.

    Carries the HTTP status that should be returned, so the error boundary
    can answer without knowing which layer raised it.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class InvalidUserId(ClientError):
    """Raised when a /users/:id path segment is not an integer."""

    def __init__(self, raw_id: str):
        super().__init__(f"Invalid user id: {raw_id}", status_code=400)
        self.raw_id = raw_id
