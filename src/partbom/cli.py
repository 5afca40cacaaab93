from __future__ import annotations

import json
import logging
from typing import Any, Callable, List, Optional

import typer

from partbom import __version__
from partbom.config import get_settings
from partbom.exceptions import PartBOMException

app = typer.Typer(add_completion=False, help="PartBOM CLI")
part_app = typer.Typer(add_completion=False, help="Part registry commands")
link_app = typer.Typer(add_completion=False, help="BOM link commands")
app.add_typer(part_app, name="part")
app.add_typer(link_app, name="link")


@app.callback()
def _root() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, default=str))


def _dump(model: Any) -> Any:
    if isinstance(model, list):
        return [_dump(m) for m in model]
    if hasattr(model, "model_dump"):
        return model.model_dump(mode="json", by_alias=True, exclude_none=True)
    if hasattr(model, "to_dict"):
        return model.to_dict()
    return model


def _run(action: Callable[[Any], Any]) -> None:
    """
    Run `action(session)` in one transaction and print its JSON result.

    Domain errors are printed to stderr as JSON and exit with code 1; the
    transaction is rolled back so nothing from the failed command persists.
    """
    from partbom import database

    settings = get_settings()
    if settings.ENVIRONMENT == "dev" and settings.SCHEMA_MODE == "create_all":
        database.init_db(create_tables=True, bind_engine=database.engine)

    try:
        with database.get_db_session() as session:
            result = _dump(action(session))
    except PartBOMException as exc:
        typer.echo(json.dumps(exc.to_dict(), default=str), err=True)
        raise typer.Exit(1)
    if result is not None:
        _echo_json(result)


@app.command()
def version() -> None:
    typer.echo(__version__)


@app.command("init-db")
def init_db_command(
    seed: Optional[bool] = typer.Option(
        None, "--seed/--no-seed", help="Load the sample BOM (default: PARTBOM_SEED_SAMPLE_DATA)"
    ),
) -> None:
    """
    Create tables (create_all mode) and re-derive identifier sequences from stored records.
    """
    from partbom import database
    from partbom.bom_engine.services.sequence_service import SequenceService

    settings = get_settings()
    database.init_db(create_tables=True, bind_engine=database.engine)

    with database.get_db_session() as session:
        counters = SequenceService(session).sync_from_records()
    typer.echo(f"Sequences: {', '.join(f'{k}={v}' for k, v in sorted(counters.items()))}")

    if seed is None:
        seed = settings.SEED_SAMPLE_DATA
    if seed:
        _seed()


def _seed(include: Optional[List[str]] = None) -> List[str]:
    from partbom import database
    from partbom.seeder import SeederRegistry

    session = database.SessionLocal()
    try:
        completed = SeederRegistry.run_all(session, include=include)
    finally:
        session.close()
    typer.echo(f"Seeders completed: {', '.join(completed) or 'none'}")
    return completed


@app.command()
def seed(
    include: List[str] = typer.Option(
        [], "--include", "-i", help="Optional seeder class to run (e.g. RandomBOMSeeder)"
    ),
) -> None:
    """
    Seed sample data. The sample assembly is skipped when parts already exist.
    """
    from partbom import database

    database.init_db(create_tables=True, bind_engine=database.engine)
    try:
        _seed(include)
    except PartBOMException as exc:
        typer.echo(json.dumps(exc.to_dict(), default=str), err=True)
        raise typer.Exit(1)


@part_app.command("create")
def part_create(
    name: str = typer.Option(..., "--name", help="Part name"),
    part_number: Optional[str] = typer.Option(
        None, "--part-number", help="Part number (default: next PRT-NNNNNN)"
    ),
    description: Optional[str] = typer.Option(None, "--description", help="Description"),
) -> None:
    from partbom.bom_engine.services.part_service import PartService

    _run(
        lambda session: PartService(session).create_part(
            name=name, part_number=part_number, description=description
        )
    )


@part_app.command("update")
def part_update(
    part_id: str = typer.Argument(..., help="Part id"),
    name: Optional[str] = typer.Option(None, "--name"),
    part_number: Optional[str] = typer.Option(None, "--part-number"),
    description: Optional[str] = typer.Option(None, "--description"),
) -> None:
    from partbom.bom_engine.services.part_service import PartService

    _run(
        lambda session: PartService(session).update_part(
            part_id, name=name, part_number=part_number, description=description
        )
    )


@part_app.command("search")
def part_search(
    part_number: Optional[str] = typer.Option(None, "--part-number"),
    name: Optional[str] = typer.Option(None, "--name"),
    q: Optional[str] = typer.Option(None, "--q", "-q", help="Match name or part number"),
) -> None:
    from partbom.bom_engine.services.part_service import PartService

    _run(
        lambda session: PartService(session).search_parts(
            part_number=part_number, name=name, q=q
        )
    )


@part_app.command("show")
def part_show(part_id: str = typer.Argument(..., help="Part id")) -> None:
    from partbom.bom_engine.services.part_service import PartService

    _run(lambda session: PartService(session).get_part_details(part_id))


@part_app.command("audit")
def part_audit(part_id: str = typer.Argument(..., help="Part id")) -> None:
    from partbom.bom_engine.services.part_service import PartService

    _run(lambda session: PartService(session).get_part_audit_logs(part_id))


@link_app.command("add")
def link_add(
    parent_id: str = typer.Argument(..., help="Parent part id"),
    child_id: str = typer.Argument(..., help="Child part id"),
    quantity: int = typer.Option(1, "--quantity", "-q", help="Units of child per parent"),
) -> None:
    from partbom.bom_engine.services.bom_service import BOMService

    _run(lambda session: BOMService(session).create_link(parent_id, child_id, quantity))


@link_app.command("update")
def link_update(
    parent_id: str = typer.Argument(..., help="Parent part id"),
    child_id: str = typer.Argument(..., help="Child part id"),
    quantity: int = typer.Option(..., "--quantity", "-q", help="Units of child per parent"),
) -> None:
    from partbom.bom_engine.services.bom_service import BOMService

    _run(lambda session: BOMService(session).update_link(parent_id, child_id, quantity))


@link_app.command("remove")
def link_remove(
    parent_id: str = typer.Argument(..., help="Parent part id"),
    child_id: str = typer.Argument(..., help="Child part id"),
) -> None:
    from partbom.bom_engine.services.bom_service import BOMService

    def _remove(session):
        BOMService(session).remove_link(parent_id, child_id)
        return {
            "message": "BOM link removed successfully.",
            "parentId": parent_id,
            "childId": child_id,
        }

    _run(_remove)


@app.command()
def tree(
    root_id: str = typer.Argument(..., help="Root part id"),
    depth: Optional[str] = typer.Option(None, "--depth", "-d", help='Levels to expand, or "all"'),
    node_limit: Optional[str] = typer.Option(None, "--node-limit", "-n", help="Max nodes"),
) -> None:
    """
    Expand the BOM below a part (depth <= 5, node limit <= 80).
    """
    from partbom.bom_engine.services.bom_tree_service import BOMTreeService

    _run(lambda session: BOMTreeService(session).get_tree(root_id, depth, node_limit))


@app.command("db")
def db_command(
    action: str = typer.Argument(
        ..., help="upgrade|downgrade|revision|current|history"
    ),
    message: Optional[str] = typer.Option(
        None, "--message", "-m", help="Migration message (for revision)"
    ),
    autogenerate: bool = typer.Option(
        True, "--autogenerate/--no-autogenerate", help="Autogenerate migration"
    ),
    revision: Optional[str] = typer.Option(
        None, "--revision", "-r", help="Target revision (for upgrade/downgrade)"
    ),
) -> None:
    """
    Database migrations via Alembic.

    Actions:
      upgrade   - Apply migrations (default: head)
      downgrade - Revert migrations
      revision  - Create new migration
      current   - Show current revision
      history   - Show migration history
    """
    import os
    import subprocess
    import sys

    alembic_ini = os.path.join(os.getcwd(), "alembic.ini")
    if not os.path.exists(alembic_ini):
        pkg_dir = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
        alembic_ini = os.path.join(pkg_dir, "alembic.ini")
        if not os.path.exists(alembic_ini):
            typer.echo("Error: alembic.ini not found", err=True)
            raise typer.Exit(1)

    cmd = [sys.executable, "-m", "alembic", "-c", alembic_ini]

    if action == "upgrade":
        cmd.extend(["upgrade", revision or "head"])
    elif action == "downgrade":
        cmd.extend(["downgrade", revision or "-1"])
    elif action == "revision":
        cmd.append("revision")
        if autogenerate:
            cmd.append("--autogenerate")
        if message:
            cmd.extend(["-m", message])
        else:
            typer.echo("Warning: No message provided, using default", err=True)
            cmd.extend(["-m", "auto migration"])
    elif action == "current":
        cmd.append("current")
    elif action == "history":
        cmd.append("history")
    else:
        typer.echo(f"Unknown action: {action}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Running: {' '.join(cmd)}", err=True)
    result = subprocess.run(cmd, cwd=os.getcwd())
    raise typer.Exit(result.returncode)


def main() -> None:
    app()
