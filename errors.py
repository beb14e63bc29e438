# bucketlist_advisor/errors.py
"""
Error taxonomy
--------------

- UnauthorizedError : credential gate (HTTP 401). Blocks everything until
                      a valid key is stored again.
- ApiError          : any other failed request (transport, 4xx, 5xx).
- ProfileValidationError : client-side field checks before profile creation.
- SessionBusyError  : a mutating request is already in flight.

An empty queue is NOT an error; the client returns None for it.
"""

from typing import List, Optional


class BucketListError(Exception):
    """Base class for everything this package raises."""


class ApiError(BucketListError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class UnauthorizedError(ApiError):
    def __init__(self, message: str = "API key required - please configure your OpenAI API key"):
        super().__init__(message, status_code=401)


class ProfileValidationError(BucketListError):
    def __init__(self, notes: List[str]):
        super().__init__("; ".join(notes))
        self.notes = notes


class SessionBusyError(BucketListError):
    def __init__(self, message: str = "Another request is still in progress"):
        super().__init__(message)
