"""Review store adapter and review submission."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from lead_intake.exceptions import LeadIntakeError
from lead_intake.models import OperationResult, Review, ReviewUser
from lead_intake.store import SERVER_TIMESTAMP

if TYPE_CHECKING:
    from lead_intake.auth import AuthSession
    from lead_intake.models import AuthUser
    from lead_intake.store import DocumentStore

logger = logging.getLogger(__name__)

REVIEWS_COLLECTION = "reviews"
DEFAULT_LIMIT = 20

MISSING_SERVICE = "Informe o serviço"
MISSING_RATING = "Selecione uma avaliação"
MISSING_MESSAGE = "Escreva sua crítica"
SIGN_IN_REQUIRED = "Faça login para enviar"


def add_review(
    store: DocumentStore, *, service: str, rating: int, message: str, user: ReviewUser
) -> OperationResult:
    """Append a review; the store stamps ``createdAt`` at write time."""
    data: dict[str, Any] = {
        "service": service,
        "rating": rating,
        "message": message,
        "user": user.model_dump(by_alias=True, exclude_none=True),
        "createdAt": SERVER_TIMESTAMP,
    }
    try:
        doc_id = store.add(REVIEWS_COLLECTION, data)
    except LeadIntakeError as exc:
        logger.exception("Error adding review")
        return OperationResult(success=False, error=str(exc))
    return OperationResult(success=True, id=doc_id)


def list_reviews(store: DocumentStore, limit: int = DEFAULT_LIMIT) -> list[Review]:
    """Return the newest reviews first; an empty list if the store fails."""
    try:
        docs = store.query(
            REVIEWS_COLLECTION, order_by="createdAt", descending=True, limit=limit
        )
    except LeadIntakeError:
        logger.exception("Error fetching reviews")
        return []

    reviews: list[Review] = []
    for doc in docs:
        try:
            reviews.append(Review.model_validate({**doc.data, "id": doc.id}))
        except ValidationError:
            logger.warning("Skipping malformed review %s", doc.id, exc_info=True)
    return reviews


def review_author(user: AuthUser) -> ReviewUser:
    """Build the author block stored with a review."""
    if user.display_name:
        name = user.display_name
    elif user.email:
        name = user.email.split("@")[0]
    else:
        name = "Usuário"
    return ReviewUser(
        uid=user.uid, name=name, email=user.email or "", photo_url=user.photo_url
    )


def submit_review(
    store: DocumentStore,
    session: AuthSession,
    *,
    service: str,
    rating: int,
    message: str,
) -> OperationResult:
    """Validate a review form and publish it for the signed-in user.

    Checks run in form order and the first failure is reported; nothing
    is written unless every check passes.
    """
    service = (service or "").strip()
    message = (message or "").strip()

    if not service:
        return OperationResult(success=False, error=MISSING_SERVICE)
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        return OperationResult(success=False, error=MISSING_RATING)
    if not message:
        return OperationResult(success=False, error=MISSING_MESSAGE)

    user = session.current_user()
    if user is None or not user.uid:
        return OperationResult(success=False, error=SIGN_IN_REQUIRED)

    result = add_review(
        store,
        service=service,
        rating=rating,
        message=message,
        user=review_author(user),
    )
    if result.success:
        logger.info("Review %s published by %s", result.id, user.uid)
    return result
