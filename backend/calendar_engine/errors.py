from typing import Dict

from fastapi import status


class BaseAppException(Exception):
    def __init__(self, code: str, message: str, http_status: int):
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)

    def to_detail(self) -> Dict[str, Dict[str, str]]:
        return {"detail": {"code": self.code, "message": self.message}}


class NotFoundError(BaseAppException):
    def __init__(self, code: str, message: str):
        super().__init__(code, message, status.HTTP_404_NOT_FOUND)


class ConflictError(BaseAppException):
    def __init__(self, code: str, message: str):
        super().__init__(code, message, status.HTTP_409_CONFLICT)


class ValidationAppError(BaseAppException):
    def __init__(self, code: str, message: str):
        super().__init__(code, message, status.HTTP_400_BAD_REQUEST)


class DropRejectedError(ValidationAppError):
    """A reschedule targeted a day the drag operation does not allow."""

    def __init__(self, message: str = "invalid drop target"):
        super().__init__("DROP_INVALID", message)


class InternalServerError(BaseAppException):
    def __init__(self, message: str = "internal error"):
        super().__init__("INTERNAL_ERROR", message, status.HTTP_500_INTERNAL_SERVER_ERROR)
