from fastapi import HTTPException


class Unauthenticated(HTTPException):
    def __init__(self, detail: str = "Not authorized to access this route"):
        super().__init__(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(HTTPException):
    def __init__(self, detail: str = "Access denied"):
        super().__init__(status_code=403, detail=detail)


class SelfInteractionForbidden(Forbidden):
    pass


class NotFound(HTTPException):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=404, detail=detail)


class InvalidState(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=409, detail=detail)


class AlreadyExists(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=409, detail=detail)


class AlreadyExpressed(AlreadyExists):
    pass


class Internal(HTTPException):
    def __init__(self, detail: str = "Internal server error"):
        super().__init__(status_code=500, detail=detail)
