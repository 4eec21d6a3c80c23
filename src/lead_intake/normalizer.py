"""Normalize loosely shaped order records into a canonical ReceiptModel.

Orders written over the life of the site come in several shapes: a flat
legacy shape (``client``/``project``/``price``), a nested shape
(``customer.name``/``service.title``/``project.budget``) and the shape the
intake form writes today (``customer``/``summary``). They all live in the
same collection without migration, so every canonical field is resolved
from an ordered list of candidate paths (``FIELD_ALIASES``). The first
candidate that is present, non-null, non-blank and of the expected kind
wins; otherwise the field's default applies.

Normalization is total: it never raises, whatever the input.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime, time
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, TypedDict

from lead_intake.models import (
    COMPLEXITIES,
    CONTACT_METHODS,
    STATUSES,
    TIMELINES,
    Customer,
    Project,
    ReceiptModel,
    Service,
)

logger = logging.getLogger(__name__)

MISSING_ORDER_ID = "ID não disponível"
NOT_INFORMED = "Não informado"
UNKNOWN_SERVICE = "Serviço não especificado"
NO_DESCRIPTION = "Sem descrição"
UNCATEGORIZED = "Não categorizado"

_TIMESTAMP_METHODS = ("to_datetime", "ToDatetime", "toDate")


class CustomerPayload(TypedDict, total=False):
    name: str
    email: str
    phone: str


class ServicePayload(TypedDict, total=False):
    title: str
    description: str
    category: str
    platform: str


class ProjectPayload(TypedDict, total=False):
    complexity: str
    timeline: str
    budget: float
    deadline: str


class SummaryPayload(TypedDict, total=False):
    title: str
    description: str
    category: str
    budget: float
    deadline: str


class FlatOrderPayload(TypedDict, total=False):
    """Legacy flat shape: the project title lives under ``project``."""

    id: str
    status: str
    createdAt: Any
    client: str
    name: str
    email: str
    phone: str
    contact: str
    project: str
    title: str
    description: str
    category: str
    platform: str
    complexity: str
    timeline: str
    price: float
    budget: float
    deadline: str
    features: list[str]
    contactMethod: str


class NestedOrderPayload(TypedDict, total=False):
    orderId: str
    status: str
    createdAt: Any
    customer: CustomerPayload
    service: ServicePayload
    project: ProjectPayload
    requirements: list[str]
    contactMethod: str


class IntakeOrderPayload(TypedDict, total=False):
    """Shape written by the service-request form."""

    status: str
    source: str
    customer: CustomerPayload
    summary: SummaryPayload
    requirements: list[str]
    contactMethod: str
    rawPayload: dict[str, Any]
    createdAt: Any
    updatedAt: Any


RawRecord = FlatOrderPayload | NestedOrderPayload | IntakeOrderPayload | Mapping[str, Any]


class Kind(Enum):
    """What a candidate value must look like to be accepted."""

    TEXT = "text"
    NUMBER = "number"
    LIST = "list"
    ANY = "any"


@dataclass(frozen=True)
class Candidate:
    path: tuple[str, ...]
    kind: Kind = Kind.TEXT
    choices: tuple[str, ...] | None = None


def _candidate(
    dotted: str, kind: Kind = Kind.TEXT, choices: tuple[str, ...] | None = None
) -> Candidate:
    return Candidate(tuple(dotted.split(".")), kind, choices)


FIELD_ALIASES: dict[str, tuple[Candidate, ...]] = {
    "order_id": (_candidate("id"), _candidate("orderId"), _candidate("order_id")),
    "created_at": (
        _candidate("createdAt", Kind.ANY),
        _candidate("created_at", Kind.ANY),
    ),
    "status": (_candidate("status", choices=STATUSES),),
    "customer.name": (
        _candidate("client"),
        _candidate("customer.name"),
        _candidate("name"),
    ),
    "customer.email": (_candidate("email"), _candidate("customer.email")),
    "customer.phone": (
        _candidate("phone"),
        _candidate("customer.phone"),
        _candidate("contact"),
    ),
    "service.title": (
        _candidate("project"),
        _candidate("service.title"),
        _candidate("title"),
        _candidate("summary.title"),
    ),
    "service.description": (
        _candidate("description"),
        _candidate("service.description"),
        _candidate("summary.description"),
    ),
    "service.category": (
        _candidate("category"),
        _candidate("service.category"),
        _candidate("summary.category"),
    ),
    "service.platform": (_candidate("platform"), _candidate("service.platform")),
    "project.complexity": (
        _candidate("complexity", choices=COMPLEXITIES),
        _candidate("project.complexity", choices=COMPLEXITIES),
    ),
    "project.timeline": (
        _candidate("timeline", choices=TIMELINES),
        _candidate("project.timeline", choices=TIMELINES),
    ),
    "project.budget": (
        _candidate("price", Kind.NUMBER),
        _candidate("budget", Kind.NUMBER),
        _candidate("project.budget", Kind.NUMBER),
        _candidate("summary.budget", Kind.NUMBER),
    ),
    "project.deadline": (
        _candidate("deadline"),
        _candidate("project.deadline"),
        _candidate("summary.deadline"),
    ),
    "requirements": (
        _candidate("features", Kind.LIST),
        _candidate("requirements", Kind.LIST),
    ),
    "contact_method": (
        _candidate("contactMethod", choices=CONTACT_METHODS),
        _candidate("contact_method", choices=CONTACT_METHODS),
    ),
}


def resolve_field(data: Mapping[str, Any], field: str, default: Any = None) -> Any:
    """Return the first acceptable candidate value for a canonical field."""
    for candidate in FIELD_ALIASES[field]:
        value = _lookup(data, candidate.path)
        accepted = _accept(value, candidate)
        if accepted is not None:
            return accepted
    return default


def build_receipt_model(data: RawRecord | Any) -> ReceiptModel:
    """Build the canonical receipt view of a raw order record.

    ``data`` is kept untouched as ``raw_payload``. Non-mapping input is
    treated as an empty record.
    """
    source: Mapping[str, Any] = data if isinstance(data, Mapping) else {}

    return ReceiptModel(
        order_id=resolve_field(source, "order_id", MISSING_ORDER_ID),
        created_at=coerce_timestamp(resolve_field(source, "created_at")),
        status=resolve_field(source, "status", "pending"),
        customer=Customer(
            name=resolve_field(source, "customer.name", NOT_INFORMED),
            email=resolve_field(source, "customer.email", NOT_INFORMED),
            phone=resolve_field(source, "customer.phone"),
        ),
        service=Service(
            title=resolve_field(source, "service.title", UNKNOWN_SERVICE),
            description=resolve_field(source, "service.description", NO_DESCRIPTION),
            category=resolve_field(source, "service.category", UNCATEGORIZED),
            platform=resolve_field(source, "service.platform"),
        ),
        project=Project(
            complexity=resolve_field(source, "project.complexity", "basic"),
            timeline=resolve_field(source, "project.timeline", "normal"),
            budget=resolve_field(source, "project.budget"),
            deadline=resolve_field(source, "project.deadline"),
        ),
        requirements=resolve_field(source, "requirements", []),
        contact_method=resolve_field(source, "contact_method", "email"),
        raw_payload=data,
    )


def coerce_timestamp(value: Any) -> datetime | None:
    """Convert any timestamp-like value to a datetime, or None.

    Accepts datetimes, dates, objects exposing a ``to_datetime``-style
    method, serialized store timestamps (``{"seconds": ..., "nanoseconds": ...}``),
    epoch milliseconds and ISO-8601 strings.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)

    try:
        for name in _TIMESTAMP_METHODS:
            method = getattr(value, name, None)
            if callable(method):
                converted = method()
                return converted if isinstance(converted, datetime) else None

        if isinstance(value, Mapping):
            return _from_seconds_mapping(value)
        if isinstance(value, int | float | Decimal):
            return datetime.fromtimestamp(float(value) / 1000, tz=UTC)
        if isinstance(value, str):
            return datetime.fromisoformat(value.strip())
    except Exception:
        logger.debug("Could not coerce %r to a timestamp", value, exc_info=True)
    return None


def is_valid_receipt_model(value: Any) -> bool:
    """Return True when ``value`` looks like a well-formed canonical receipt."""
    if isinstance(value, ReceiptModel):
        return True
    if not isinstance(value, Mapping):
        return False
    order_id = value.get("order_id", value.get("orderId"))
    return (
        isinstance(order_id, str)
        and isinstance(value.get("customer"), Mapping)
        and isinstance(value.get("service"), Mapping)
        and isinstance(value.get("project"), Mapping)
    )


def _from_seconds_mapping(value: Mapping[str, Any]) -> datetime | None:
    seconds = value.get("seconds", value.get("_seconds"))
    nanos = value.get("nanoseconds", value.get("_nanoseconds", 0)) or 0
    if not _is_number(seconds) or not _is_number(nanos):
        return None
    return datetime.fromtimestamp(float(seconds) + float(nanos) / 1e9, tz=UTC)


def _lookup(data: Mapping[str, Any], path: tuple[str, ...]) -> Any:
    current: Any = data
    try:
        for key in path:
            if not isinstance(current, Mapping):
                return None
            current = current.get(key)
    except Exception:
        logger.debug("Lookup of %s failed", ".".join(path), exc_info=True)
        return None
    return current


def _accept(value: Any, candidate: Candidate) -> Any:
    """Return the value converted for the candidate's kind, or None to skip it."""
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None

    if candidate.kind is Kind.TEXT:
        text = _as_text(value)
        if text is None or candidate.choices is None:
            return text
        normalized = text.strip().lower()
        return normalized if normalized in candidate.choices else None
    if candidate.kind is Kind.NUMBER:
        return _as_decimal(value)
    if candidate.kind is Kind.LIST:
        if isinstance(value, list | tuple):
            return _as_list(value)
        return None
    return value


def _as_text(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    if _is_number(value):
        try:
            return str(value)
        except ValueError:
            logger.debug("Number too large to use as text", exc_info=True)
    return None


def _as_list(value: list[Any] | tuple[Any, ...]) -> list[str]:
    items: list[str] = []
    for item in value:
        if item is None:
            continue
        try:
            items.append(str(item))
        except ValueError:
            logger.debug("Skipping list item that cannot be shown as text")
    return items


def _as_decimal(value: Any) -> Decimal | None:
    if isinstance(value, str):
        value = value.strip()
    elif not _is_number(value):
        return None
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        logger.debug("Could not read %s as a decimal", type(value).__name__)
        return None
    return number if number.is_finite() else None


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float | Decimal) and not isinstance(value, bool)
