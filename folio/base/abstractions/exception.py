from typing import Any, Optional


class FolioException(Exception):
    def __init__(
        self, message: str, status_code: int, detail: Optional[Any] = None
    ):
        self.message = message
        self.status_code = status_code
        self.detail = detail
        super().__init__(self.message)

    def to_dict(self):
        return {
            "message": self.message,
            "status_code": self.status_code,
            "detail": self.detail,
            "error_type": self.__class__.__name__,
        }


class FolioValidationError(FolioException):
    """Raised when a request is rejected before reaching any store."""

    def __init__(self, message: str, detail: Optional[Any] = None):
        super().__init__(message, status_code=422, detail=detail)


class SearchFailedError(FolioException):
    """A catalog or analytics store call failed.

    Only the operation name is exposed; the underlying error is chained.
    """

    def __init__(self, operation: str, status_code: int = 500):
        self.operation = operation
        super().__init__(
            f"{operation.replace('_', ' ').capitalize()} failed",
            status_code,
            detail={"operation": operation},
        )
