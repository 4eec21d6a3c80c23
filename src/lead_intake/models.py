"""Domain, form and canonical receipt models for lead intake."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Status = Literal["pending", "approved", "in_progress", "completed", "cancelled"]
Complexity = Literal["basic", "intermediate", "advanced"]
Timeline = Literal["urgent", "normal", "flexible"]
ContactMethod = Literal["email", "whatsapp"]
ServiceCategory = Literal[
    "bots", "websites", "ecommerce", "mobile", "api", "consulting", "other"
]

STATUSES: tuple[str, ...] = get_args(Status)
COMPLEXITIES: tuple[str, ...] = get_args(Complexity)
TIMELINES: tuple[str, ...] = get_args(Timeline)
CONTACT_METHODS: tuple[str, ...] = get_args(ContactMethod)

SERVICE_CATEGORIES: dict[str, str] = {
    "bots": "Bots (Discord, Telegram, etc)",
    "websites": "Websites e Landing Pages",
    "ecommerce": "E-commerce",
    "mobile": "Aplicativos Mobile",
    "api": "APIs e Integrações",
    "consulting": "Consultoria Técnica",
    "other": "Outro",
}

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )


class Customer(_CamelModel):
    name: str
    email: str
    phone: str | None = None


class Service(_CamelModel):
    title: str
    description: str
    category: str
    platform: str | None = None


class Project(_CamelModel):
    complexity: Complexity = "basic"
    timeline: Timeline = "normal"
    budget: Decimal | None = None
    deadline: str | None = None


class ReceiptModel(_CamelModel):
    """Canonical view of an order, rebuilt from the raw record on every read.

    Dumping with ``by_alias=True`` yields the camelCase keys used by the
    stored documents, so a dump can be fed back through the normalizer.
    """

    order_id: str
    created_at: datetime | None = None
    status: Status = "pending"
    customer: Customer
    service: Service
    project: Project
    requirements: list[str] = Field(default_factory=list)
    contact_method: ContactMethod = "email"
    raw_payload: Any = None


class ReviewUser(BaseModel):
    """Author details copied onto a review at write time."""

    model_config = ConfigDict(populate_by_name=True)

    uid: str
    name: str
    email: str
    photo_url: str | None = Field(default=None, alias="photoURL")


class Review(BaseModel):
    """A published review as read back from the store."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str | None = None
    service: str
    rating: int = Field(ge=1, le=5)
    message: str
    user: ReviewUser
    created_at: datetime | None = None


class OrderForm(BaseModel):
    """Service request submitted through the intake form."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1)
    email: str = Field(pattern=_EMAIL_PATTERN)
    phone: str | None = None
    service: str = Field(min_length=1)
    category: ServiceCategory
    description: str = Field(min_length=1)
    budget: float | None = Field(default=None, gt=0)
    deadline: str | None = None
    requirements: list[str] = Field(default_factory=list)
    contact_method: ContactMethod = "email"

    @field_validator("phone", "deadline", "budget", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("requirements", mode="before")
    @classmethod
    def _split_requirements(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            parts = value.replace("\n", ",").split(",")
            return [part.strip() for part in parts if part.strip()]
        return value


@dataclass(frozen=True)
class AuthUser:
    """A signed-in identity as reported by the auth provider."""

    uid: str
    display_name: str | None = None
    email: str | None = None
    photo_url: str | None = None


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a store or auth operation; failures carry a message."""

    success: bool
    id: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class AuthResult:
    success: bool
    user: AuthUser | None = None
    error: str | None = None
