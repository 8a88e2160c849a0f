"""
Input schemas — one validated type per write operation.

Validation is kept strictly apart from the workflow services: each service
calls ``parse(Schema, payload)`` first and only ever sees a validated
instance. A failed parse raises ``ValidationError`` (VALIDATION_ERROR) with a
field -> message map, before any mutation starts.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Optional, TypeVar

import pydantic
from pydantic import (
    AfterValidator,
    AnyUrl,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    TypeAdapter,
    field_validator,
)

from scopeflow.core.exceptions import ValidationError

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class DecisionAction(str, Enum):
    APPROVE = "APPROVE"
    REQUEST_CHANGES = "REQUEST_CHANGES"


class ProjectStatus(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"


class InputModel(BaseModel):
    """Base for request schemas: trims strings, ignores unknown keys."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)


# ── Scopes ───────────────────────────────────────────────────────────────────

# Largest value a NUMERIC(12, 2) column holds
MAX_PRICE = 9_999_999_999.99


def _require_number(value):
    # JSON booleans are ints to Python, and numeric strings are not prices
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("must be a number")
    return value


def _whole_cents(value: float) -> float:
    if Decimal(str(value)).as_tuple().exponent < -2:
        raise ValueError("must have at most 2 decimal places")
    return value


Price = Annotated[
    float,
    BeforeValidator(_require_number),
    Field(ge=0, le=MAX_PRICE, allow_inf_nan=False),
    AfterValidator(_whole_cents),
]


class ScopeCreate(InputModel):
    content: str = Field(..., min_length=1)
    price: Price = 0

    @field_validator("price", mode="before")
    @classmethod
    def _null_price_is_zero(cls, value):
        return 0 if value is None else value


class ScopeUpdate(InputModel):
    content: Optional[str] = Field(default=None, min_length=1)
    price: Optional[Price] = None


# ── Deliverables ─────────────────────────────────────────────────────────────

_url_adapter = TypeAdapter(AnyUrl)


class DeliverableCreate(InputModel):
    file_url: str = Field(..., min_length=1, max_length=2048)
    notes: Optional[str] = None

    @field_validator("file_url")
    @classmethod
    def _must_be_absolute_url(cls, value: str) -> str:
        # Validated as a URL but stored exactly as sent
        try:
            _url_adapter.validate_python(value)
        except pydantic.ValidationError:
            raise ValueError("must be an absolute URL") from None
        return value

    @field_validator("notes", mode="before")
    @classmethod
    def _blank_notes_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


# ── Client decisions ─────────────────────────────────────────────────────────


class DecisionInput(InputModel):
    action: DecisionAction
    comments: Optional[str] = Field(default=None, max_length=5000)

    @field_validator("comments", mode="before")
    @classmethod
    def _blank_comments_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


# ── Projects & accounts ──────────────────────────────────────────────────────


class ProjectCreate(InputModel):
    name: str = Field(..., min_length=1, max_length=200)
    client_email: Optional[EmailStr] = None

    @field_validator("client_email", mode="before")
    @classmethod
    def _blank_email_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ProjectStatusUpdate(InputModel):
    status: ProjectStatus


class RegisterInput(InputModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    full_name: Optional[str] = Field(default=None, max_length=200)


class LoginInput(InputModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


# ── Parsing ──────────────────────────────────────────────────────────────────


def parse(schema: type[SchemaT], payload: Any) -> SchemaT:
    """Validate ``payload`` against ``schema``.

    An already-validated instance passes through unchanged.

    Raises:
        ValidationError: with ``details`` keyed by field name.
    """
    if isinstance(payload, schema):
        return payload
    if payload is None:
        payload = {}
    try:
        return schema.model_validate(payload)
    except pydantic.ValidationError as exc:
        details: dict[str, str] = {}
        for err in exc.errors():
            field = ".".join(str(p) for p in err.get("loc", ())) or "body"
            details.setdefault(field, err.get("msg", "invalid value"))
        raise ValidationError(
            f"Invalid input: {', '.join(sorted(details))}", details=details,
        ) from exc
