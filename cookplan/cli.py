"""
CLI interface for the CookPlan cooking-session engine.
"""
import click
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from cookplan.config import settings
from cookplan.db.database import SessionLocal, create_tables
from cookplan.errors import CookPlanError, InvalidItemsFileError
from cookplan.models.schemas import (
    CookingBatch, OptimizationMode, OptimizationOptions, OptimizationResult,
    QuickAddItem, SessionItem,
)
from cookplan.engine.event_generator import get_event_description
from cookplan.engine.session_executor import ExecutionState, SessionExecutor
from cookplan.engine.session_optimizer import (
    CookingSessionOptimizer, get_optimization_summary,
)
from cookplan.engine.temperature_hints import calculate_temperature_hint
from cookplan.services.cooking_session_service import CookingSessionService
from cookplan.services.session_store import SessionStore

logger = logging.getLogger(__name__)


def load_items(path: Path) -> List[SessionItem]:
    """
    Read items from a JSON file.

    Expected format: a list of objects with name, temperature, time_minutes
    and optional shake_halfway. Out-of-range numbers are clamped.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise InvalidItemsFileError(str(path), str(e)) from e

    if not isinstance(data, list):
        raise InvalidItemsFileError(str(path), "expected a JSON list of items")

    try:
        return [SessionItem.model_validate(entry) for entry in data]
    except ValidationError as e:
        raise InvalidItemsFileError(str(path), str(e)) from e


def load_batches(path: Path, items: List[SessionItem]) -> List[CookingBatch]:
    """
    Read manual batches from a JSON file.

    Expected format: a list of batches, each a list of item names (or ids)
    in cooking order.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise InvalidItemsFileError(str(path), str(e)) from e

    if not isinstance(data, list) or not all(isinstance(entry, list) for entry in data):
        raise InvalidItemsFileError(str(path), "expected a JSON list of item-name lists")

    by_key = {}
    for item in items:
        by_key.setdefault(item.id, item)
        by_key.setdefault(item.name.lower(), item)

    batches = []
    for index, names in enumerate(data):
        item_ids = []
        for name in names:
            item = by_key.get(str(name).lower()) or by_key.get(str(name))
            if item is None:
                raise InvalidItemsFileError(str(path), f"unknown item '{name}'")
            item_ids.append(item.id)
        batches.append(CookingBatch(order=index + 1, item_ids=item_ids))
    return batches


class CookPlanCLI:
    """CLI application state."""

    def __init__(self):
        self.optimizer = CookingSessionOptimizer()
        self._db = None

    def session_service(self) -> CookingSessionService:
        """Service backed by the local session database."""
        if self._db is None:
            create_tables()
            self._db = SessionLocal()
        return CookingSessionService(store=SessionStore(self._db), optimizer=self.optimizer)

    def close(self):
        if self._db is not None:
            self._db.close()
            self._db = None


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, verbose: bool):
    """CookPlan - single-chamber cooking session planner"""
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    ctx.obj = CookPlanCLI()
    ctx.call_on_close(ctx.obj.close)


def _fail(error: CookPlanError):
    """Print a structured error and exit."""
    click.echo(error.to_response().model_dump_json(indent=2), err=True)
    sys.exit(error.exit_code)


def _display_result(result: OptimizationResult, items: List[SessionItem]):
    """Print phases and events of an optimized plan."""
    names = {item.id: item.name for item in items}

    click.echo("=" * 60)
    click.echo("COOKING PLAN")
    click.echo("=" * 60)

    for phase in result.phases:
        members = [item for item in items if item.id in phase.item_ids]
        hint = calculate_temperature_hint(members)
        click.echo(
            f"\nPhase {phase.order + 1}: {phase.target_temperature}C for "
            f"{phase.total_duration_minutes} min ({hint.message})"
        )
        click.echo("  Items: " + ", ".join(names.get(item_id, item_id) for item_id in phase.item_ids))
        for event in phase.events:
            click.echo(f"    {get_event_description(event)}")
        if phase.rest_minutes_after:
            click.echo(f"  Rest {phase.rest_minutes_after} min")

    click.echo("\n" + get_optimization_summary(result))


@cli.command()
@click.argument('items_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--batches', 'batches_file', type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='JSON list of item-name lists to cook as manual batches')
@click.option('--json', 'as_json', is_flag=True, help='Print the plan as JSON')
@click.pass_obj
def plan(app: CookPlanCLI, items_file: Path, batches_file: Optional[Path], as_json: bool):
    """Show the optimized cooking plan for ITEMS_FILE."""
    try:
        items = load_items(items_file)
        options = None
        if batches_file is not None:
            options = OptimizationOptions(
                mode=OptimizationMode.MANUAL_BATCHES,
                batches=load_batches(batches_file, items),
            )
    except CookPlanError as e:
        _fail(e)

    result = app.optimizer.optimize(items, options)

    if as_json:
        click.echo(result.model_dump_json(indent=2))
        return

    if not result.phases:
        click.echo("No items to cook")
        return

    _display_result(result, items)


@cli.command()
@click.argument('items_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def estimate(app: CookPlanCLI, items_file: Path):
    """Quick total-time estimate for ITEMS_FILE."""
    try:
        items = load_items(items_file)
    except CookPlanError as e:
        _fail(e)

    click.echo(f"Estimated total time: {app.optimizer.estimate_total_time(items)} minutes")


@cli.command()
@click.argument('items_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--manual', is_flag=True, help='Cook the suggested batches instead of auto phases')
@click.pass_obj
def cook(app: CookPlanCLI, items_file: Path, manual: bool):
    """Guided cooking of ITEMS_FILE with a live phase timer."""
    try:
        items = load_items(items_file)
        service = app.session_service()
    except CookPlanError as e:
        _fail(e)

    session = service.create_session()
    for item in items:
        service.add_item(QuickAddItem(
            name=item.name,
            temperature=item.temperature,
            time_minutes=item.time_minutes,
            shake_halfway=item.shake_halfway,
        ))
    if manual:
        manager = service.batches
        manager.apply_batch_suggestion(manager.auto_suggest_batches())

    try:
        executor = service.start_session()
    except CookPlanError as e:
        _fail(e)

    if executor is None:
        click.echo("No items to cook")
        return

    with executor:
        _run_guided(executor)

    click.echo(f"\nSession {session.id} {session.status.value}.")


def _run_guided(executor: SessionExecutor):
    """Interactive loop: one prompt per event."""
    while executor.state == ExecutionState.RUNNING:
        phase = executor.get_current_phase()
        event = executor.get_current_event()
        progress = executor.get_progress()
        remaining = executor.remaining_seconds

        click.echo(
            f"\nPhase {progress.current_phase}/{progress.total_phases} at "
            f"{phase.target_temperature}C - {remaining // 60}:{remaining % 60:02d} left"
            f"{' (running)' if executor.timer_running else ''}"
        )
        if event is not None:
            click.echo(f"  Next: {get_event_description(event)}")

        choice = click.prompt(
            "[d]one, [t]imer start/pause, [s]kip phase, [c]ancel",
            type=click.Choice(['d', 't', 's', 'c']),
            default='d',
            show_choices=False,
        )
        if choice == 'd':
            executor.complete_event()
        elif choice == 't':
            executor.toggle_timer()
        elif choice == 's':
            executor.complete_phase()
        else:
            executor.cancel_session()


@cli.command()
@click.option('--limit', default=None, type=int, help='Number of sessions to show')
@click.pass_obj
def history(app: CookPlanCLI, limit: Optional[int]):
    """List recent cooking sessions."""
    try:
        sessions = app.session_service().load_recent_sessions(limit)
    except CookPlanError as e:
        _fail(e)

    if not sessions:
        click.echo("No cooking sessions yet.")
        return

    for session in sessions:
        names = ", ".join(item.name for item in session.items)
        click.echo(
            f"{session.created_at:%Y-%m-%d %H:%M}  {session.status.value:11}  "
            f"{session.total_estimated_minutes:3} min  {names}"
        )


if __name__ == '__main__':
    cli()
