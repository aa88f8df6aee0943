"""Field-scoped validation errors.

Validators return a list of errors, each naming the config field it concerns,
so a failure can be mapped to a specific line of the user's install config.

Rendering:
    >>> path = FieldPath("platform", "aws", "region")
    >>> str(FieldError.invalid(path, "us-east4", "unknown region"))
    'platform.aws.region: Invalid value: "us-east4": unknown region'
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import json
from typing import Any

from pydantic import ValidationError


class ErrorType(str, Enum):
    """Category of a field error."""

    REQUIRED = "Required value"
    INVALID = "Invalid value"
    NOT_SUPPORTED = "Unsupported value"
    DUPLICATE = "Duplicate value"
    FORBIDDEN = "Forbidden"


class FieldPath:
    """Dotted path to a config field (``compute[0].platform.aws.zones``)."""

    def __init__(self, *parts: str) -> None:
        self._rendered = ".".join(parts)

    def child(self, *names: str) -> FieldPath:
        path = FieldPath()
        path._rendered = ".".join(p for p in (self._rendered, *names) if p)
        return path

    def index(self, i: int) -> FieldPath:
        path = FieldPath()
        path._rendered = f"{self._rendered}[{i}]"
        return path

    def __str__(self) -> str:
        return self._rendered

    def __repr__(self) -> str:
        return f"FieldPath({self._rendered!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, FieldPath) and other._rendered == self._rendered

    def __hash__(self) -> int:
        return hash(self._rendered)


def _render_value(value: Any) -> str:
    try:
        return json.dumps(value, default=str)
    except (TypeError, ValueError):
        return repr(value)


@dataclass(frozen=True)
class FieldError:
    """A single validation failure scoped to one field."""

    type: ErrorType
    field: str
    value: Any = None
    detail: str = ""

    @classmethod
    def required(cls, path: FieldPath, detail: str) -> FieldError:
        return cls(ErrorType.REQUIRED, str(path), None, detail)

    @classmethod
    def invalid(cls, path: FieldPath, value: Any, detail: str) -> FieldError:
        return cls(ErrorType.INVALID, str(path), value, detail)

    @classmethod
    def not_supported(cls, path: FieldPath, value: Any, supported: list[str]) -> FieldError:
        quoted = ", ".join(json.dumps(s) for s in supported)
        return cls(ErrorType.NOT_SUPPORTED, str(path), value, f"supported values: {quoted}")

    @classmethod
    def duplicate(cls, path: FieldPath, value: Any) -> FieldError:
        return cls(ErrorType.DUPLICATE, str(path), value, "")

    @classmethod
    def forbidden(cls, path: FieldPath, detail: str) -> FieldError:
        return cls(ErrorType.FORBIDDEN, str(path), None, detail)

    def __str__(self) -> str:
        if self.type in (ErrorType.REQUIRED, ErrorType.FORBIDDEN):
            body = f"{self.field}: {self.type.value}"
        else:
            body = f"{self.field}: {self.type.value}: {_render_value(self.value)}"
        return f"{body}: {self.detail}" if self.detail else body


class FieldErrorList(list[FieldError]):
    """Aggregated validation result.

    Renders a single error as itself and several as ``[e1, e2]``.
    """

    def __str__(self) -> str:
        if len(self) == 1:
            return str(self[0])
        return "[" + ", ".join(str(e) for e in self) + "]"

    @property
    def fields(self) -> list[str]:
        return [e.field for e in self]


def from_validation_error(error: ValidationError) -> FieldErrorList:
    """Convert a pydantic schema error into field errors.

    Locations use the document's (aliased) key names, so the fields match
    what the user wrote.
    """
    errors = FieldErrorList()
    for item in error.errors():
        path = FieldPath()
        for part in item["loc"]:
            path = path.index(part) if isinstance(part, int) else path.child(str(part))
        if item["type"] == "missing":
            errors.append(FieldError.required(path, item["msg"]))
        elif item["type"] == "extra_forbidden":
            errors.append(FieldError.forbidden(path, "field is not permitted"))
        else:
            errors.append(FieldError.invalid(path, item.get("input"), item["msg"]))
    return errors
