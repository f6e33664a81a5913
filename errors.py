from __future__ import annotations


class AssessmentError(Exception):
    """Base for errors the core hands back to callers.

    Routers never catch these; ``main.py`` installs one handler that renders
    them as ``{"detail": ..., "code": ...}`` with ``status_code``.
    """

    status_code = 500
    code = "error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(AssessmentError):
    status_code = 404
    code = "not_found"

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")
        self.resource = resource


class Forbidden(AssessmentError):
    status_code = 403
    code = "forbidden"


class ValidationFailed(AssessmentError):
    status_code = 400
    code = "validation"


class Conflict(AssessmentError):
    status_code = 409
    code = "conflict"
