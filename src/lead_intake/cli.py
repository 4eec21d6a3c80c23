"""CLI entry point for lead-intake."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

import click

from lead_intake.auth import AuthSession, build_auth_provider
from lead_intake.config import (
    get_auth_config,
    get_database_url,
    get_display_timezone,
    get_export_path,
    get_log_level,
    get_reviews_limit,
)
from lead_intake.dashboard import find_receipt, load_receipts, render_table
from lead_intake.display import to_display_time
from lead_intake.exceptions import FormValidationError, StoreError
from lead_intake.intake import parse_order_form, submit_order
from lead_intake.models import CONTACT_METHODS, SERVICE_CATEGORIES
from lead_intake.renderer import render_receipt_html, render_receipt_pdf
from lead_intake.reviews import list_reviews, submit_review
from lead_intake.store import DocumentStore, ReceiptFileStore, open_store


def _store() -> DocumentStore:
    try:
        return open_store(get_database_url())
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Lead intake: reviews, service requests and the orders dashboard."""
    logging.basicConfig(
        level="DEBUG" if verbose else get_log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command("init-db")
def init_db() -> None:
    """Create the documents table in PostgreSQL."""
    from lead_intake.db import init_schema

    try:
        init_schema()
    except (StoreError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo("Schema ready.")


@cli.command()
def services() -> None:
    """List the service categories offered on the intake form."""
    for value, label in SERVICE_CATEGORIES.items():
        click.echo(f"{value:<12} {label}")


@cli.command("submit-order")
@click.option("--name", required=True)
@click.option("--email", required=True)
@click.option("--phone", default="")
@click.option("--service", "service_title", required=True, help="Service wanted.")
@click.option(
    "--category", required=True, type=click.Choice(list(SERVICE_CATEGORIES))
)
@click.option("--description", required=True)
@click.option("--budget", default="", help="Estimated budget in BRL.")
@click.option("--deadline", default="")
@click.option("--requirement", "requirements", multiple=True)
@click.option(
    "--contact-method", type=click.Choice(CONTACT_METHODS), default="email"
)
def submit_order_command(
    service_title: str, requirements: tuple[str, ...], **values: Any
) -> None:
    """Submit a service request."""
    try:
        form = parse_order_form(
            {**values, "service": service_title, "requirements": list(requirements)}
        )
    except FormValidationError as exc:
        for error in exc.errors:
            click.echo(error, err=True)
        raise click.ClickException("Formulário inválido") from exc

    result = submit_order(_store(), form)
    if not result.success:
        raise click.ClickException(
            f"Erro ao enviar o pedido. Por favor, tente novamente. ({result.error})"
        )
    click.echo(f"Pedido recebido com sucesso! ID do Pedido: {result.id}")


@cli.command()
@click.option("--limit", type=int, default=None)
def orders(limit: int | None) -> None:
    """Show stored orders as a receipts table."""
    try:
        receipts = load_receipts(_store(), limit=limit)
    except StoreError as exc:
        raise click.ClickException("Erro ao carregar pedidos") from exc
    click.echo(f"Pedidos ({len(receipts)})")
    click.echo(render_table(receipts, get_display_timezone()))


@cli.command()
@click.argument("order_id")
@click.option("--pdf", "as_pdf", is_flag=True, help="Export to the receipt store.")
def receipt(order_id: str, as_pdf: bool) -> None:
    """Render one order as an HTML receipt, or export it as PDF."""
    try:
        found = find_receipt(_store(), order_id)
    except StoreError as exc:
        raise click.ClickException("Erro ao carregar pedidos") from exc
    if found is None:
        raise click.ClickException(f"Pedido não encontrado: {order_id}")

    tz = get_display_timezone()
    if not as_pdf:
        click.echo(render_receipt_html(found, tz))
        return

    file_store = ReceiptFileStore(get_export_path())
    created = to_display_time(found.created_at or datetime.now(tz=UTC), tz)
    relative = file_store.save(
        created, found.customer.name, found.order_id, render_receipt_pdf(found, tz)
    )
    click.echo(str(file_store.get_path(relative)))


@cli.command()
@click.option("--limit", type=int, default=None)
def reviews(limit: int | None) -> None:
    """List published reviews, newest first."""
    published = list_reviews(_store(), limit or get_reviews_limit())
    if not published:
        click.echo("Nenhuma crítica ainda.")
        return
    for item in published:
        stars = "★" * item.rating + "☆" * (5 - item.rating)
        click.echo(f"{stars}  {item.service} - {item.user.name}")
        click.echo(f"    {item.message}")


@cli.command()
@click.option("--service", required=True)
@click.option("--rating", type=click.IntRange(1, 5), required=True)
@click.option("--message", required=True)
@click.option("--email", prompt=True)
@click.option("--password", prompt=True, hide_input=True)
def review(service: str, rating: int, message: str, email: str, password: str) -> None:
    """Sign in and publish a review."""
    try:
        session = AuthSession(build_auth_provider(get_auth_config()))
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc

    signed_in = session.sign_in(email, password)
    if not signed_in.success:
        raise click.ClickException(signed_in.error or "Erro ao fazer login")

    result = submit_review(
        _store(), session, service=service, rating=rating, message=message
    )
    session.sign_out()
    if not result.success:
        raise click.ClickException(result.error or "Erro ao enviar crítica")
    click.echo("Crítica enviada! Sua avaliação foi registrada com sucesso")
