"""Shared test fixtures."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import pytest

from lead_intake.adapters.mock import MockAuthProvider
from lead_intake.auth import AuthSession
from lead_intake.store import InMemoryDocumentStore

if TYPE_CHECKING:
    from pathlib import Path

FIXED_NOW = datetime(2025, 6, 15, 13, 30, 0, tzinfo=UTC)


@pytest.fixture
def export_root(tmp_path: Path) -> Path:
    """Provide a temporary directory as the receipt export root."""
    root = tmp_path / "receipts"
    root.mkdir()
    return root


@pytest.fixture
def memory_store() -> InMemoryDocumentStore:
    """Provide an empty in-memory store with a fixed clock."""
    return InMemoryDocumentStore(clock=lambda: FIXED_NOW)


@pytest.fixture
def session() -> AuthSession:
    """Provide a signed-out session over the mock provider."""
    return AuthSession(MockAuthProvider())


@pytest.fixture
def signed_in_session(session: AuthSession) -> AuthSession:
    result = session.sign_in("ana@example.com", "secret")  # pragma: allowlist secret
    assert result.success
    return session


@pytest.fixture
def nested_order() -> dict[str, Any]:
    """Provide an order in the nested customer/service/project shape."""
    return {
        "orderId": "ord-42",
        "createdAt": datetime(2025, 3, 10, 9, 5, tzinfo=UTC),
        "status": "approved",
        "customer": {"name": "Bia", "email": "bia@example.com", "phone": "11999"},
        "service": {
            "title": "Bot Discord",
            "description": "Moderation bot",
            "category": "bots",
            "platform": "discord",
        },
        "project": {
            "complexity": "advanced",
            "timeline": "urgent",
            "budget": 5000,
            "deadline": "30 dias",
        },
        "requirements": ["slash commands", "logs"],
        "contactMethod": "whatsapp",
    }


@pytest.fixture
def order_form_values() -> dict[str, Any]:
    """Provide valid raw values for the intake form."""
    return {
        "name": "Carla Souza",
        "email": "carla@example.com",
        "phone": "(11) 99999-9999",
        "service": "Landing page",
        "category": "websites",
        "description": "Página para lançamento de produto",
        "budget": "5000",
        "deadline": "30 dias",
        "requirements": ["responsivo", "formulário"],
    }
