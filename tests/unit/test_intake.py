"""Tests for lead_intake.intake."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from lead_intake.exceptions import FormValidationError, StoreError
from lead_intake.intake import (
    ORDER_SOURCE,
    ORDERS_COLLECTION,
    build_order_payload,
    parse_order_form,
    submit_order,
)
from lead_intake.normalizer import build_receipt_model
from lead_intake.store import SERVER_TIMESTAMP, InMemoryDocumentStore


class TestParseOrderForm:
    """Tests for parse_order_form."""

    def test_valid_form(self, order_form_values: dict[str, Any]) -> None:
        form = parse_order_form(order_form_values)

        assert form.name == "Carla Souza"
        assert form.budget == 5000.0
        assert form.category == "websites"
        assert form.contact_method == "email"
        assert form.requirements == ["responsivo", "formulário"]

    def test_optional_fields_blank(self, order_form_values: dict[str, Any]) -> None:
        values = {**order_form_values, "phone": "", "budget": "", "deadline": "  "}
        form = parse_order_form(values)

        assert form.phone is None
        assert form.budget is None
        assert form.deadline is None

    def test_requirements_from_text(self, order_form_values: dict[str, Any]) -> None:
        values = {**order_form_values, "requirements": "login, painel\nrelatórios"}
        form = parse_order_form(values)
        assert form.requirements == ["login", "painel", "relatórios"]

    def test_strips_whitespace(self, order_form_values: dict[str, Any]) -> None:
        form = parse_order_form({**order_form_values, "name": "  Carla  "})
        assert form.name == "Carla"

    def test_missing_required_fields(self) -> None:
        with pytest.raises(FormValidationError) as excinfo:
            parse_order_form({"email": "x@example.com"})

        labels = " ".join(excinfo.value.errors)
        assert "Nome Completo" in labels
        assert "Serviço Desejado" in labels
        assert "Categoria" in labels
        assert "Descrição Detalhada" in labels

    @pytest.mark.parametrize(
        ("field", "value", "label"),
        [
            ("email", "not-an-email", "Email"),
            ("category", "games", "Categoria"),
            ("budget", "-10", "Orçamento Estimado"),
            ("budget", "muito", "Orçamento Estimado"),
            ("name", "   ", "Nome Completo"),
            ("contact_method", "fax", "Forma de Contato"),
        ],
    )
    def test_invalid_field(
        self, order_form_values: dict[str, Any], field: str, value: str, label: str
    ) -> None:
        with pytest.raises(FormValidationError) as excinfo:
            parse_order_form({**order_form_values, field: value})

        assert len(excinfo.value.errors) == 1
        assert excinfo.value.errors[0].startswith(f"{label}:")


class TestBuildOrderPayload:
    """Tests for build_order_payload."""

    def test_payload_shape(self, order_form_values: dict[str, Any]) -> None:
        payload = build_order_payload(parse_order_form(order_form_values))

        assert payload["status"] == "pending"
        assert payload["source"] == ORDER_SOURCE
        assert payload["customer"] == {
            "name": "Carla Souza",
            "email": "carla@example.com",
            "phone": "(11) 99999-9999",
        }
        assert payload["summary"] == {
            "title": "Landing page",
            "description": "Página para lançamento de produto",
            "category": "websites",
            "budget": 5000.0,
            "deadline": "30 dias",
        }
        assert payload["requirements"] == ["responsivo", "formulário"]
        assert payload["rawPayload"]["name"] == "Carla Souza"
        assert payload["createdAt"] is SERVER_TIMESTAMP
        assert payload["updatedAt"] is SERVER_TIMESTAMP

    def test_normalizes_to_receipt(self, order_form_values: dict[str, Any]) -> None:
        payload = build_order_payload(parse_order_form(order_form_values))
        receipt = build_receipt_model(payload)

        assert receipt.customer.name == "Carla Souza"
        assert receipt.service.title == "Landing page"
        assert receipt.service.category == "websites"
        assert receipt.project.deadline == "30 dias"
        assert receipt.requirements == ["responsivo", "formulário"]


class TestSubmitOrder:
    """Tests for submit_order."""

    def test_persists_order(
        self, memory_store: InMemoryDocumentStore, order_form_values: dict[str, Any]
    ) -> None:
        result = submit_order(memory_store, parse_order_form(order_form_values))

        assert result.success is True
        [doc] = memory_store.query(ORDERS_COLLECTION)
        assert doc.id == result.id
        assert doc.data["createdAt"] == doc.data["updatedAt"]
        assert doc.data["createdAt"] is not SERVER_TIMESTAMP

    def test_store_failure_reported(self, order_form_values: dict[str, Any]) -> None:
        store = MagicMock()
        store.add.side_effect = StoreError("quota exceeded")

        result = submit_order(store, parse_order_form(order_form_values))

        assert result.success is False
        assert result.error == "quota exceeded"
