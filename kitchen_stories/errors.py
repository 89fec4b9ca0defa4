"""Domain errors and their JSON rendering.

Every error answers with ``{"error": ..., "message": ...}`` and the HTTP
status carried by the exception class.
"""

import logging
from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger("kitchen_stories.errors")


class KitchenStoriesError(Exception):
    status_code = 500
    error = "Internal Server Error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.error)
        self.message = message


class RecipeNotFound(KitchenStoriesError):
    status_code = 404
    error = "Recipe not found"

    def __init__(self, recipe_id: int):
        super().__init__(f"No recipe with id {recipe_id}")
        self.recipe_id = recipe_id


class AdminAuthError(KitchenStoriesError):
    status_code = 401
    error = "Unauthorized"

    def __init__(self):
        super().__init__("Invalid admin password")


class UploadRejected(KitchenStoriesError):
    status_code = 400
    error = "Only image files are allowed!"


class UploadTooLarge(KitchenStoriesError):
    status_code = 413
    error = "File too large"


class ChildPayloadInvalid(KitchenStoriesError):
    status_code = 422

    def __init__(self, field: str, message: str):
        self.error = f"Invalid {field}"
        super().__init__(message)
        self.field = field


def kitchen_stories_error_handler(request: Request, exc: KitchenStoriesError) -> JSONResponse:
    content = {"error": exc.error}
    if exc.message:
        content["message"] = exc.message
    return JSONResponse(status_code=exc.status_code, content=content)


def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(f"Store error on {request.method} {request.url.path}: {exc}")
    detail = getattr(exc, "orig", None) or exc
    return JSONResponse(status_code=500, content={"error": str(detail)})
