"""Display formatting for canonical receipts."""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from lead_intake.config import get_display_timezone

if TYPE_CHECKING:
    from datetime import datetime, tzinfo

    from lead_intake.models import ReceiptModel

logger = logging.getLogger(__name__)

DATE_PLACEHOLDER = "Data não disponível"
BUDGET_PLACEHOLDER = "Não informado"

STATUS_LABELS: dict[str, str] = {
    "pending": "Pendente",
    "approved": "Aprovado",
    "in_progress": "Em Progresso",
    "completed": "Concluído",
    "cancelled": "Cancelado",
}

_MAX_FRACTION = Decimal("0.001")
_QUANTIZE_LIMIT = 24


def status_label(status: str) -> str:
    """Return the human label for a status; unknown values pass through."""
    return STATUS_LABELS.get(status, status)


def get_status_display(receipt: ReceiptModel) -> str:
    return status_label(receipt.status)


def get_formatted_date(receipt: ReceiptModel, tz: tzinfo | None = None) -> str:
    """Format ``created_at`` as ``DD/MM/YYYY HH:MM``.

    Timezone-aware values are shown in ``tz``, falling back to the
    configured DISPLAY_TIMEZONE. Naive values are shown as stored.
    """
    moment = receipt.created_at
    if moment is None:
        return DATE_PLACEHOLDER
    return to_display_time(moment, tz).strftime("%d/%m/%Y %H:%M")


def to_display_time(moment: datetime, tz: tzinfo | None = None) -> datetime:
    """Convert an aware datetime to the display zone.

    Naive values, and values the conversion would push out of the
    supported date range, are returned unchanged.
    """
    if moment.tzinfo is None:
        return moment
    try:
        return moment.astimezone(tz or get_display_timezone())
    except (OverflowError, ValueError):
        logger.debug("Cannot convert %s to the display timezone", moment)
        return moment


def get_budget_display(receipt: ReceiptModel) -> str:
    budget = receipt.project.budget
    if budget is None or budget == 0:
        return BUDGET_PLACEHOLDER
    return f"R$ {format_brl_number(budget)}"


def format_brl_number(amount: Decimal) -> str:
    """Format a number the pt-BR way: ``1234.5`` -> ``1.234,5``.

    Keeps at most three fraction digits and drops trailing zeros.
    """
    # quantize needs context precision for every integer digit plus three decimals
    if amount.adjusted() <= _QUANTIZE_LIMIT:
        amount = amount.quantize(_MAX_FRACTION, rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    integer, _, fraction = f"{abs(amount):f}".partition(".")
    fraction = fraction.rstrip("0")
    grouped = f"{int(integer):,}".replace(",", ".")
    return f"{sign}{grouped},{fraction}" if fraction else f"{sign}{grouped}"
