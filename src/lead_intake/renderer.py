"""Receipt-to-HTML and receipt-to-PDF rendering."""

from __future__ import annotations

import html
import json
import logging
import pprint
from typing import TYPE_CHECKING

from lead_intake.display import (
    get_budget_display,
    get_formatted_date,
    get_status_display,
)

if TYPE_CHECKING:
    from datetime import tzinfo

    from lead_intake.models import ReceiptModel

logger = logging.getLogger(__name__)

STATUS_COLORS: dict[str, tuple[str, str]] = {
    "approved": ("#dcfce7", "#166534"),
    "pending": ("#fef9c3", "#854d0e"),
    "cancelled": ("#fee2e2", "#991b1b"),
    "in_progress": ("#dbeafe", "#1e40af"),
    "completed": ("#f3e8ff", "#6b21a8"),
}
_DEFAULT_COLORS = ("#f3f4f6", "#1f2937")

RECEIPT_TEMPLATE = """\
<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<style>
  body {{ font-family: sans-serif; font-size: 12px; margin: 2em; }}
  .header {{ border-bottom: 1px solid #ccc; padding-bottom: 1em; margin-bottom: 1em; }}
  .header p, section p {{ margin: 0.2em 0; }}
  .badge {{ background: {badge_bg}; color: {badge_fg}; padding: 0.1em 0.6em; border-radius: 4px; }}
  .mono {{ font-family: monospace; }}
  pre {{ white-space: pre-wrap; word-wrap: break-word; background: #f9fafb; padding: 1em; }}
</style>
</head>
<body>
<div class="header">
  <p><strong>ID do Pedido:</strong> <span class="mono">{order_id}</span></p>
  <p><strong>Data/Hora:</strong> {created_at}</p>
  <p><strong>Status:</strong> <span class="badge">{status}</span></p>
</div>
<section>
  <h2>Cliente</h2>
  <p><strong>Nome:</strong> {customer_name}</p>
  <p><strong>Email:</strong> {customer_email}</p>
  <p><strong>Telefone:</strong> {customer_phone}</p>
  <p><strong>Contato preferido:</strong> {contact_method}</p>
</section>
<section>
  <h2>Serviço</h2>
  <p><strong>Título:</strong> {service_title}</p>
  <p><strong>Categoria:</strong> {service_category}</p>
  <p><strong>Plataforma:</strong> {service_platform}</p>
  <p><strong>Descrição:</strong> {service_description}</p>
</section>
<section>
  <h2>Projeto</h2>
  <p><strong>Complexidade:</strong> {complexity}</p>
  <p><strong>Prazo:</strong> {timeline} {deadline}</p>
  <p><strong>Orçamento:</strong> {budget}</p>
</section>
<section>
  <h2>Requisitos</h2>
  {requirements}
</section>
<section>
  <h2>Dados originais</h2>
  <pre>{raw_payload}</pre>
</section>
</body>
</html>
"""

_EMPTY = "—"


def render_receipt_html(receipt: ReceiptModel, tz: tzinfo | None = None) -> str:
    """Render a canonical receipt as a standalone HTML page."""
    badge_bg, badge_fg = STATUS_COLORS.get(receipt.status, _DEFAULT_COLORS)
    deadline = f"({receipt.project.deadline})" if receipt.project.deadline else ""

    return RECEIPT_TEMPLATE.format(
        badge_bg=badge_bg,
        badge_fg=badge_fg,
        order_id=_esc(receipt.order_id),
        created_at=_esc(get_formatted_date(receipt, tz)),
        status=_esc(get_status_display(receipt)),
        customer_name=_esc(receipt.customer.name),
        customer_email=_esc(receipt.customer.email),
        customer_phone=_esc(receipt.customer.phone),
        contact_method=_esc(receipt.contact_method),
        service_title=_esc(receipt.service.title),
        service_category=_esc(receipt.service.category),
        service_platform=_esc(receipt.service.platform),
        service_description=_esc(receipt.service.description),
        complexity=_esc(receipt.project.complexity),
        timeline=_esc(receipt.project.timeline),
        deadline=html.escape(deadline),
        budget=_esc(get_budget_display(receipt)),
        requirements=_render_requirements(receipt.requirements),
        raw_payload=_esc(_dump_payload(receipt.raw_payload)),
    )


def render_receipt_pdf(receipt: ReceiptModel, tz: tzinfo | None = None) -> bytes:
    """Render a canonical receipt to PDF bytes via weasyprint."""
    return _html_to_pdf_bytes(render_receipt_html(receipt, tz))


def _render_requirements(requirements: list[str]) -> str:
    if not requirements:
        return f"<p>{_EMPTY}</p>"
    items = "".join(f"<li>{html.escape(item)}</li>" for item in requirements)
    return f"<ul>{items}</ul>"


def _dump_payload(payload: object) -> str:
    """Pretty-print the raw payload; values JSON cannot encode fall back to str().

    Payloads JSON rejects outright (non-string keys, cycles, oversized
    integers) are shown with pprint instead.
    """
    try:
        return json.dumps(payload, indent=2, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        logger.debug("Raw payload is not JSON encodable", exc_info=True)
    try:
        return pprint.pformat(payload)
    except ValueError:
        return f"<{type(payload).__name__}>"


def _esc(value: str | None) -> str:
    return html.escape(value) if value else _EMPTY


def _html_to_pdf_bytes(html_content: str) -> bytes:
    """Convert HTML string to PDF bytes via weasyprint."""
    import weasyprint

    doc = weasyprint.HTML(string=html_content)
    return doc.write_pdf()  # type: ignore[no-any-return]
