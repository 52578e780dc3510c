class PostError(Exception):
    """Base class for failures surfaced by the post authority"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthorized(PostError):
    status_code = 401


class Forbidden(PostError):
    status_code = 403


class NotFound(PostError):
    status_code = 404


class Conflict(PostError):
    # like/unlike toggles that don't match the current state
    status_code = 400


class ServiceFailure(PostError):
    status_code = 500
