"""Tests for lead_intake.reviews."""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest

from lead_intake.auth import AuthSession
from lead_intake.exceptions import StoreError
from lead_intake.models import AuthUser, ReviewUser
from lead_intake.reviews import (
    MISSING_MESSAGE,
    MISSING_RATING,
    MISSING_SERVICE,
    REVIEWS_COLLECTION,
    SIGN_IN_REQUIRED,
    add_review,
    list_reviews,
    review_author,
    submit_review,
)
from lead_intake.store import SERVER_TIMESTAMP, Document, InMemoryDocumentStore

AUTHOR = ReviewUser(uid="u-1", name="Ana", email="ana@example.com")


class TestAddReview:
    """Tests for add_review."""

    def test_writes_with_server_timestamp(self) -> None:
        store = MagicMock()
        store.add.return_value = "rev-1"

        result = add_review(store, service="Bot", rating=4, message="Bom", user=AUTHOR)

        assert result.success is True
        assert result.id == "rev-1"
        collection, data = store.add.call_args[0]
        assert collection == REVIEWS_COLLECTION
        assert data["createdAt"] is SERVER_TIMESTAMP
        assert data["user"] == {"uid": "u-1", "name": "Ana", "email": "ana@example.com"}

    def test_photo_url_uses_store_key(self) -> None:
        store = MagicMock()
        user = ReviewUser(uid="u", name="A", email="a@b.c", photo_url="https://x/p.png")

        add_review(store, service="Bot", rating=4, message="Bom", user=user)

        data = store.add.call_args[0][1]
        assert data["user"]["photoURL"] == "https://x/p.png"

    def test_store_failure_reported(self) -> None:
        store = MagicMock()
        store.add.side_effect = StoreError("write refused")

        result = add_review(store, service="Bot", rating=4, message="Bom", user=AUTHOR)

        assert result.success is False
        assert result.error == "write refused"


class TestListReviews:
    """Tests for list_reviews."""

    def test_newest_first_with_limit(self) -> None:
        times = iter(
            [
                datetime(2025, 1, 1, tzinfo=UTC),
                datetime(2025, 2, 1, tzinfo=UTC),
                datetime(2025, 3, 1, tzinfo=UTC),
            ]
        )
        store = InMemoryDocumentStore(clock=lambda: next(times))
        for service in ("jan", "feb", "mar"):
            add_review(store, service=service, rating=5, message="ok", user=AUTHOR)

        reviews = list_reviews(store, limit=2)

        assert [r.service for r in reviews] == ["mar", "feb"]
        assert reviews[0].id is not None
        assert reviews[0].created_at == datetime(2025, 3, 1, tzinfo=UTC)
        assert reviews[0].user.name == "Ana"

    def test_parses_iso_timestamps(self) -> None:
        store = MagicMock()
        store.query.return_value = [
            Document(
                id="r1",
                data={
                    "service": "Site",
                    "rating": 3,
                    "message": "Ok",
                    "user": {"uid": "u", "name": "B", "email": "b@example.com"},
                    "createdAt": "2025-05-01T12:00:00+00:00",
                },
            )
        ]

        [review] = list_reviews(store)

        assert review.id == "r1"
        assert review.created_at == datetime(2025, 5, 1, 12, tzinfo=UTC)

    def test_malformed_documents_skipped(self) -> None:
        store = MagicMock()
        store.query.return_value = [
            Document(id="bad", data={"service": "Site", "rating": 9}),
            Document(
                id="good",
                data={
                    "service": "Bot",
                    "rating": 5,
                    "message": "Top",
                    "user": {"uid": "u", "name": "C", "email": "c@example.com"},
                },
            ),
        ]

        reviews = list_reviews(store)

        assert [r.id for r in reviews] == ["good"]
        assert reviews[0].created_at is None

    def test_store_failure_returns_empty(self) -> None:
        store = MagicMock()
        store.query.side_effect = StoreError("unavailable")
        assert list_reviews(store) == []


class TestReviewAuthor:
    """Tests for review_author."""

    def test_display_name(self) -> None:
        user = AuthUser(uid="u", display_name="Ana Lima", email="ana@example.com")
        assert review_author(user).name == "Ana Lima"

    def test_email_local_part(self) -> None:
        assert review_author(AuthUser(uid="u", email="bruno@example.com")).name == "bruno"

    def test_anonymous(self) -> None:
        author = review_author(AuthUser(uid="u"))
        assert author.name == "Usuário"
        assert author.email == ""


class TestSubmitReview:
    """Tests for submit_review."""

    def test_unauthenticated_rejected_before_write(self, session: AuthSession) -> None:
        store = MagicMock()

        result = submit_review(
            store, session, service="Bot Discord", rating=5, message="Ótimo"
        )

        assert result.success is False
        assert result.error == SIGN_IN_REQUIRED
        store.add.assert_not_called()

    def test_publishes_for_signed_in_user(
        self,
        memory_store: InMemoryDocumentStore,
        signed_in_session: AuthSession,
    ) -> None:
        result = submit_review(
            memory_store,
            signed_in_session,
            service="  Bot Discord ",
            rating=5,
            message=" Ótimo ",
        )

        assert result.success is True
        [review] = list_reviews(memory_store)
        assert review.id == result.id
        assert review.service == "Bot Discord"
        assert review.message == "Ótimo"
        assert review.user.email == "ana@example.com"
        assert review.user.name == "Usuário Teste"

    @pytest.mark.parametrize(
        ("service", "rating", "message", "error"),
        [
            ("", 5, "Ótimo", MISSING_SERVICE),
            ("   ", 0, "", MISSING_SERVICE),
            ("Bot", 0, "Ótimo", MISSING_RATING),
            ("Bot", 6, "Ótimo", MISSING_RATING),
            ("Bot", 3, "  ", MISSING_MESSAGE),
        ],
    )
    def test_validation_order(
        self,
        signed_in_session: AuthSession,
        service: str,
        rating: int,
        message: str,
        error: str,
    ) -> None:
        store = MagicMock()

        result = submit_review(
            store, signed_in_session, service=service, rating=rating, message=message
        )

        assert result.error == error
        store.add.assert_not_called()

    def test_form_errors_reported_before_sign_in(self, session: AuthSession) -> None:
        result = submit_review(MagicMock(), session, service="", rating=5, message="x")
        assert result.error == MISSING_SERVICE
