"""Command-line interface for Warden.

This module provides the CLI commands for managing the policy database and
inspecting authorization decisions.
"""

import json
import os
from typing import NoReturn

import click

from warden import __version__
from warden.core.config import get_settings
from warden.core.logging import configure_logging, get_logger


def _parse_context(values: tuple[str, ...]) -> dict[str, object]:
    """Parse ``key=value`` pairs; comma-separated values become lists."""
    context: dict[str, object] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"Expected key=value, got {item!r}", param_hint="--context")
        context[key.strip()] = (
            [part.strip() for part in value.split(",") if part.strip()]
            if "," in value
            else value
        )
    return context


@click.group()
@click.version_option(version=__version__, prog_name="Warden")
@click.option(
    "--debug/--no-debug",
    default=None,
    help="Enable debug mode (overrides WARDEN_DEBUG)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    default=None,
    help="Set log level (overrides WARDEN_LOG_LEVEL)",
)
def cli(debug: bool | None, log_level: str | None) -> None:
    """Warden - role, field and row level authorization engine."""
    if debug is not None:
        os.environ["WARDEN_DEBUG"] = "true" if debug else "false"
    if log_level is not None:
        os.environ["WARDEN_LOG_LEVEL"] = log_level
    if debug is not None or log_level is not None:
        get_settings.cache_clear()
    configure_logging(get_settings())


@cli.command()
@click.option(
    "--seed/--no-seed",
    default=True,
    help="Seed the system roles after creating the tables",
)
def init_db(seed: bool) -> None:
    """Create the policy tables (and the system roles)."""
    import asyncio

    from warden.domain.services import PolicyAdminService
    from warden.infrastructure.persistence.database import get_db_manager, init_database

    async def initialize() -> None:
        db = get_db_manager()
        try:
            await init_database(db)
            click.echo("Database initialized successfully.")
            if seed:
                async with db.session() as session:
                    created = await PolicyAdminService(session).seed_system_roles()
                click.echo(f"Seeded {len(created)} system role(s).")
        finally:
            await db.disconnect()

    asyncio.run(initialize())


@cli.command()
def seed_roles() -> None:
    """Create the system roles that do not exist yet."""
    import asyncio

    from warden.domain.services import PolicyAdminService
    from warden.infrastructure.persistence.database import get_db_manager

    async def seed() -> None:
        db = get_db_manager()
        try:
            async with db.session() as session:
                created = await PolicyAdminService(session).seed_system_roles()
        finally:
            await db.disconnect()
        if created:
            for role in created:
                click.echo(f"Created {role.name} (level {role.level})")
        else:
            click.echo("System roles already present.")

    asyncio.run(seed())


@cli.command()
@click.argument("user_id")
@click.argument("resource")
@click.argument("action")
@click.option(
    "--role",
    "roles",
    multiple=True,
    help="Evaluate with these role names instead of the user's assignments",
)
@click.option(
    "--context",
    "context_values",
    multiple=True,
    metavar="KEY=VALUE",
    help="Evaluation context value for data scope rules (repeatable)",
)
def explain(
    user_id: str,
    resource: str,
    action: str,
    roles: tuple[str, ...],
    context_values: tuple[str, ...],
) -> None:
    """Print the authorization decision for USER_ID on RESOURCE:ACTION as JSON."""
    import asyncio

    from warden.domain.entities import EvaluationContext, Principal
    from warden.domain.exceptions import AuthorizationError
    from warden.domain.services import AuthorizationService
    from warden.infrastructure.persistence.database import get_db_manager
    from warden.infrastructure.persistence.sql_policy_store import SqlPolicyStore

    logger = get_logger(__name__)
    values = _parse_context(context_values)
    principal = Principal(user_id=user_id, role_names=roles)
    context = EvaluationContext.for_principal(principal, **values)

    async def evaluate() -> dict[str, object]:
        db = get_db_manager()
        try:
            async with db.session() as session:
                service = AuthorizationService(SqlPolicyStore(session))
                decision = await service.authorize(principal, resource, action, context)
                return decision.to_dict()
        finally:
            await db.disconnect()

    try:
        result = asyncio.run(evaluate())
    except AuthorizationError as e:
        logger.error("Explain failed", user_id=user_id, error=str(e))
        raise click.ClickException(str(e)) from e

    click.echo(json.dumps(result, indent=2, default=str))


@cli.command()
def catalog() -> None:
    """Print the resource, operator and value type catalog as JSON."""
    from warden.domain.services import get_metadata_catalog

    click.echo(json.dumps(get_metadata_catalog(), indent=2))


@cli.command()
def info() -> None:
    """Display Warden configuration."""
    settings = get_settings()

    click.echo(f"""
Warden v{settings.app_version}
{'=' * 40}

Configuration:
  Environment:  {settings.environment}
  Debug:        {settings.debug}

Database:
  URL:          {settings.database_url}
  Echo:         {settings.db_echo}

Authorization:
  Admin roles:  {', '.join(settings.admin_role_names)}
  Admin level:  <= {settings.admin_max_level}
  Identifier:   {settings.identifier_field}
  Strict perms: {settings.raise_on_invalid_permission}
  Field debug:  {settings.field_debug_enabled}
  Cache TTL:    {settings.permission_cache_ttl_seconds}s

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
""")


def main() -> NoReturn:
    """Main entry point for the CLI.

    This function is called when the `warden` command is run
    or when using `python -m warden`.
    """
    cli()


if __name__ == "__main__":
    main()
