from typing import Optional

from fastapi import HTTPException, status

# Next step the client should take after an access denial
LOGIN = "login"
SUBMIT_SOLUTION = "submit_solution"


class LabShareError(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, required_action: Optional[str] = None):
        super().__init__(
            status_code=self.status_code,
            detail={"message": message, "required_action": required_action},
        )
        self.message = message
        self.required_action = required_action


class NotFound(LabShareError):
    status_code = status.HTTP_404_NOT_FOUND


class Forbidden(LabShareError):
    status_code = status.HTTP_403_FORBIDDEN


class Conflict(LabShareError):
    status_code = status.HTTP_409_CONFLICT


class Unauthenticated(LabShareError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message, required_action=LOGIN)
