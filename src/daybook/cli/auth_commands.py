"""CLI commands for signing in and out."""

from datetime import timezone
from typing import Optional

import click

from daybook.cli.common import console, fail, get_backend, get_config, get_session_manager
from daybook.core.errors import AuthenticationError, DaybookError


def _email_or_remembered(ctx: click.Context, email: Optional[str]) -> str:
    email = email or get_config(ctx).get("auth.remember_email")
    if not email:
        fail("Email address is required")
    return email


@click.command()
@click.argument("email")
@click.password_option(help="Password (prompted if omitted)")
@click.pass_context
def signup(ctx: click.Context, email: str, password: str) -> None:
    """Create an account and log in.

    Example:
        daybook signup me@example.com
    """
    backend = get_backend(ctx)
    manager = get_session_manager(ctx, backend)

    try:
        session = manager.sign_up(backend, email, password)
        get_config(ctx).set("auth.remember_email", session.email)
    except (DaybookError, ValueError) as e:
        fail(e)

    console.print(f"[green]✓[/green] Account created for {session.email}")
    console.print("You are now logged in.")


@click.command()
@click.argument("email", required=False)
@click.option("--password", prompt=True, hide_input=True, help="Password (prompted if omitted)")
@click.pass_context
def login(ctx: click.Context, email: Optional[str], password: str) -> None:
    """Log in with email and password.

    The last email used is remembered, so later logins may omit it.

    Example:
        daybook login me@example.com
    """
    email = _email_or_remembered(ctx, email)
    backend = get_backend(ctx)
    manager = get_session_manager(ctx, backend)

    try:
        session = manager.sign_in(backend, email, password)
        get_config(ctx).set("auth.remember_email", session.email)
    except (DaybookError, ValueError) as e:
        fail(e)

    console.print(f"[green]✓[/green] Logged in as {session.email}")


@click.command()
@click.pass_context
def logout(ctx: click.Context) -> None:
    """Log out and forget the stored session."""
    backend = get_backend(ctx)
    if get_session_manager(ctx, backend).sign_out():
        console.print("[yellow]✓[/yellow] Logged out")
    else:
        console.print("[yellow]Not logged in[/yellow]")


@click.command()
@click.pass_context
def whoami(ctx: click.Context) -> None:
    """Show the signed-in account."""
    backend = get_backend(ctx)
    try:
        session = get_session_manager(ctx, backend).current()
    except AuthenticationError as e:
        fail(e)

    expires = session.expires_at.astimezone(timezone.utc)
    console.print(f"Logged in as [bold]{session.email}[/bold]")
    console.print(f"[dim]Session expires {expires:%Y-%m-%d %H:%M} UTC[/dim]")
