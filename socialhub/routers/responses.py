"""Helpers that shape service results into HTTP responses."""
from __future__ import annotations

from typing import Any, Callable, TypeVar

from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..schemas import ActionResponse
from ..services import ActionError, ActionResult, Page, http_error

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


def action_response(result: ActionResult, data_model: type[BaseModel] | None = None) -> JSONResponse:
    """Return ``result`` as JSON with the status code matching its outcome."""

    data = result.data
    if data is not None and data_model is not None:
        data = data_model.model_validate(data, from_attributes=True)
    body = ActionResponse(
        success=result.success,
        message=result.message,
        is_active=result.is_active,
        count=result.count,
        errors=result.errors,
        data=data,
    )
    content = body.model_dump(mode="json", exclude_none=True, exclude={"data"})
    if data is not None:
        # Nested nulls are kept so clients see a stable shape
        content["data"] = body.model_dump(mode="json", include={"data"})["data"]
    return JSONResponse(status_code=result.status_code, content=content)


def page_response(page: Page[Any], envelope: type[M], item_model: type[BaseModel]) -> M:
    return envelope(
        items=[item_model.model_validate(item, from_attributes=True) for item in page.items],
        next_cursor=page.next_cursor,
    )


def read_or_raise(operation: Callable[[], T]) -> T:
    """Run a read operation, mapping domain errors onto ``HTTPException``."""

    try:
        return operation()
    except ActionError as exc:
        raise http_error(exc) from exc


__all__ = ["action_response", "page_response", "read_or_raise"]
