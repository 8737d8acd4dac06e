"""
Domain errors and their HTTP mapping

Core components raise these; routers let them propagate and the handler
registered in main turns them into JSON error responses.
"""

import logging
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class LearnHubError(Exception):
    """Base class for rejected transitions"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": type(self).__name__, "detail": self.message}


class ValidationError(LearnHubError):
    """Malformed input: missing title, empty quiz, bad option index..."""

    status_code = 422


class NotFoundError(LearnHubError):
    """Course, lesson, enrollment or session id no longer exists"""

    status_code = 404


class AccessDeniedError(LearnHubError):
    """Caller may not perform the operation (not enrolled, not owner, not admin)"""

    status_code = 403


class IncompleteSubmissionError(LearnHubError):
    """Quiz submitted with unanswered questions"""

    status_code = 409

    def __init__(self, unanswered: List[str], message: Optional[str] = None):
        super().__init__(message or "Please answer all questions before submitting.")
        self.unanswered = list(unanswered)

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["unanswered"] = self.unanswered
        return payload


async def learnhub_error_handler(request: Request, exc: LearnHubError):
    logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(LearnHubError, learnhub_error_handler)
