"""
Payload validation for post writes.

The rules themselves are declared on the pydantic schemas; this module runs
them and turns pydantic's error list into field issues with an enumerated
reason, so clients get a stable contract regardless of pydantic's wording.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import PayloadValidationError
from .schemas import PostCreate, PostUpdate

_Schema = TypeVar("_Schema", bound=BaseModel)


class IssueReason(str, Enum):
    MISSING = "missing"
    WRONG_TYPE = "wrong_type"
    EMPTY = "empty"
    NULL = "null"
    UNKNOWN_FIELD = "unknown_field"
    INVALID = "invalid"


_REASONS: Dict[str, IssueReason] = {
    "missing": IssueReason.MISSING,
    "string_type": IssueReason.WRONG_TYPE,
    "list_type": IssueReason.WRONG_TYPE,
    "model_type": IssueReason.WRONG_TYPE,
    "model_attributes_type": IssueReason.WRONG_TYPE,
    "dict_type": IssueReason.WRONG_TYPE,
    "json_invalid": IssueReason.WRONG_TYPE,
    "string_too_short": IssueReason.EMPTY,
    "null_value": IssueReason.NULL,
    "extra_forbidden": IssueReason.UNKNOWN_FIELD,
}


@dataclass(frozen=True)
class FieldIssue:
    field: str
    reason: IssueReason

    def as_dict(self) -> Dict[str, str]:
        data = asdict(self)
        data["reason"] = self.reason.value
        return data


def _field_name(loc: Iterable[Any]) -> str:
    parts = [str(p) for p in loc]
    return ".".join(parts) if parts else "payload"


# PUBLIC_INTERFACE
def issues_from_errors(errors: Iterable[Dict[str, Any]]) -> List[FieldIssue]:
    """Map pydantic/FastAPI error dicts to FieldIssue entries, preserving order."""
    return [
        FieldIssue(
            field=_field_name(err.get("loc", ())),
            reason=_REASONS.get(err.get("type", ""), IssueReason.INVALID),
        )
        for err in errors
    ]


def _validate(schema: Type[_Schema], payload: Any) -> _Schema:
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        issues = issues_from_errors(e.errors())
        raise PayloadValidationError([i.as_dict() for i in issues]) from e


# PUBLIC_INTERFACE
def validate_create(payload: Any) -> PostCreate:
    """Validate a create payload; raise PayloadValidationError listing failing fields."""
    return _validate(PostCreate, payload)


# PUBLIC_INTERFACE
def validate_update(payload: Any) -> PostUpdate:
    """Validate a partial-update payload; raise PayloadValidationError listing failing fields."""
    return _validate(PostUpdate, payload)
