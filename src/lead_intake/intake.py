"""Service-request intake: form parsing and order persistence."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from lead_intake.exceptions import FormValidationError, LeadIntakeError
from lead_intake.models import OperationResult, OrderForm
from lead_intake.store import SERVER_TIMESTAMP

if TYPE_CHECKING:
    from collections.abc import Mapping

    from lead_intake.store import DocumentStore

logger = logging.getLogger(__name__)

ORDERS_COLLECTION = "orders"
ORDER_SOURCE = "service_request"

FIELD_LABELS: dict[str, str] = {
    "name": "Nome Completo",
    "email": "Email",
    "phone": "Telefone",
    "service": "Serviço Desejado",
    "category": "Categoria",
    "description": "Descrição Detalhada",
    "budget": "Orçamento Estimado",
    "deadline": "Prazo Desejado",
    "requirements": "Requisitos",
    "contact_method": "Forma de Contato",
}


def parse_order_form(values: Mapping[str, Any]) -> OrderForm:
    """Validate raw form values.

    Raises FormValidationError listing one message per invalid field.
    """
    try:
        return OrderForm.model_validate(dict(values))
    except ValidationError as exc:
        errors = []
        for error in exc.errors():
            field = str(error["loc"][0]) if error["loc"] else ""
            label = FIELD_LABELS.get(field, field)
            errors.append(f"{label}: {error['msg']}")
        raise FormValidationError(errors) from exc


def build_order_payload(form: OrderForm) -> dict[str, Any]:
    """Assemble the document written to the orders collection."""
    return {
        "status": "pending",
        "source": ORDER_SOURCE,
        "customer": {
            "name": form.name,
            "email": form.email,
            "phone": form.phone or "",
        },
        "summary": {
            "title": form.service,
            "description": form.description,
            "category": form.category,
            "budget": form.budget,
            "deadline": form.deadline or "",
        },
        "requirements": list(form.requirements),
        "contactMethod": form.contact_method,
        "rawPayload": form.model_dump(mode="json"),
        "createdAt": SERVER_TIMESTAMP,
        "updatedAt": SERVER_TIMESTAMP,
    }


def submit_order(store: DocumentStore, form: OrderForm) -> OperationResult:
    """Persist a validated order and return its id."""
    try:
        doc_id = store.add(ORDERS_COLLECTION, build_order_payload(form))
    except LeadIntakeError as exc:
        logger.exception("Error creating order")
        return OperationResult(success=False, error=str(exc))

    logger.info("Order created with id %s", doc_id)
    return OperationResult(success=True, id=doc_id)
