"""Response Envelope — the {status, message?, data?, pagination?} wrapper for success responses.

Invariants:
    - status is always "success" here; error envelopes come from CatalogError.to_response()
    - Keys with no value are omitted, never sent as null
"""

from typing import Any

from pydantic import BaseModel

from catalog.core.domain_types import BookRecord
from catalog.core.pagination import PaginationMeta
from catalog.schemas.book import BookResponse


def serialize_book(record: BookRecord) -> dict:
    return BookResponse.model_validate(record).model_dump(mode="json")


def success_envelope(
    data: Any = None,
    message: str | None = None,
    pagination: PaginationMeta | None = None,
) -> dict:
    body: dict[str, Any] = {"status": "success"}
    if message is not None:
        body["message"] = message
    if pagination is not None:
        body["pagination"] = pagination.to_dict()
    if data is not None:
        body["data"] = _serialize(data)
    return body


def _serialize(data: Any) -> Any:
    if isinstance(data, BookRecord):
        return serialize_book(data)
    if isinstance(data, list):
        return [_serialize(item) for item in data]
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    return data
