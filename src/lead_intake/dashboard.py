"""Internal orders dashboard: loads stored orders as canonical receipts."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

from lead_intake.display import (
    get_budget_display,
    get_formatted_date,
    get_status_display,
)
from lead_intake.intake import ORDERS_COLLECTION
from lead_intake.normalizer import build_receipt_model

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import tzinfo

    from lead_intake.models import ReceiptModel
    from lead_intake.store import DocumentStore

logger = logging.getLogger(__name__)

TABLE_COLUMNS = ("ID do Pedido", "Data/Hora", "Cliente", "Serviço", "Orçamento", "Status")
_MAX_CELL = 32


def load_receipts(store: DocumentStore, limit: int | None = None) -> list[ReceiptModel]:
    """Return stored orders as receipts, newest first.

    The document id is injected as ``id`` so it becomes the order id.
    Documents whose data is not a mapping are skipped.
    Store failures propagate as StoreError.
    """
    docs = store.query(
        ORDERS_COLLECTION, order_by="createdAt", descending=True, limit=limit
    )
    receipts: list[ReceiptModel] = []
    for doc in docs:
        if not isinstance(doc.data, Mapping):
            logger.warning("Skipping malformed order %s", doc.id)
            continue
        receipts.append(build_receipt_model({**doc.data, "id": doc.id}))
    logger.debug("Loaded %d receipts", len(receipts))
    return receipts


def find_receipt(store: DocumentStore, order_id: str) -> ReceiptModel | None:
    for receipt in load_receipts(store):
        if receipt.order_id == order_id:
            return receipt
    return None


def render_table(receipts: Iterable[ReceiptModel], tz: tzinfo | None = None) -> str:
    """Render receipts as a fixed-width text table."""
    rows = [
        (
            receipt.order_id,
            get_formatted_date(receipt, tz),
            receipt.customer.name,
            receipt.service.title,
            get_budget_display(receipt),
            get_status_display(receipt),
        )
        for receipt in receipts
    ]
    if not rows:
        return "Nenhum pedido encontrado."

    cells = [TABLE_COLUMNS, *[tuple(_truncate(c) for c in row) for row in rows]]
    widths = [max(len(row[i]) for row in cells) for i in range(len(TABLE_COLUMNS))]
    lines = [
        "  ".join(cell.ljust(width) for cell, width in zip(row, widths, strict=True))
        for row in cells
    ]
    lines.insert(1, "  ".join("-" * width for width in widths))
    return "\n".join(line.rstrip() for line in lines)


def _truncate(value: str) -> str:
    if len(value) <= _MAX_CELL:
        return value
    return value[: _MAX_CELL - 1] + "…"
