from typing import Optional


class LaCuraError(Exception):
    """Base error; `status_code` is the HTTP status it renders as."""
    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class BadRequestError(LaCuraError):
    status_code = 400


class ForbiddenError(LaCuraError):
    status_code = 403


class NotAttendeeError(ForbiddenError):
    pass


class NotFoundError(LaCuraError):
    status_code = 404


class UpstreamError(LaCuraError):
    """A calendar, search, mail or model call failed."""
    status_code = 500

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message)
        self.upstream_status = upstream_status


class ConfigurationError(LaCuraError):
    status_code = 500
