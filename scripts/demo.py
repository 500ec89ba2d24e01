#!/usr/bin/env python3
"""
Demo script to validate the CookPlan scheduling engine.
Plans a mixed dinner automatically, then again with manual batches, and
walks the executor through the first plan without a real-time timer.
"""
from cookplan.models.schemas import CookingSession, OptimizationMode, OptimizationOptions, SessionItem
from cookplan.engine.batch_manager import BatchManager
from cookplan.engine.event_generator import get_event_description
from cookplan.engine.session_optimizer import CookingSessionOptimizer, get_optimization_summary
from cookplan.engine.session_executor import ExecutionState, SessionExecutor


def print_section(title: str):
    """Print a formatted section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70 + "\n")


def print_plan(result, items, title="COOKING PLAN"):
    """Print phases and their timelines in a readable format."""
    names = {item.id: item.name for item in items}
    print(f"\n{title}")
    print("-" * 70)

    for phase in result.phases:
        members = ", ".join(names[item_id] for item_id in phase.item_ids)
        print(f"\nPhase {phase.order + 1} @ {phase.target_temperature}C ({phase.total_duration_minutes} min): {members}")
        for event in phase.events:
            status_icon = "✓" if event.completed else "○"
            print(f"  {status_icon} {get_event_description(event)}")
        if phase.rest_minutes_after:
            print(f"  ... rest {phase.rest_minutes_after} min")

    print("\n" + get_optimization_summary(result))


def main():
    """Run scheduling engine demonstration."""
    print_section("CookPlan Scheduling Engine Demo")

    items = [
        SessionItem(id="chicken", name="chicken thighs", temperature=200, time_minutes=25, shake_halfway=True),
        SessionItem(id="potatoes", name="potato wedges", temperature=200, time_minutes=20, shake_halfway=True),
        SessionItem(id="brussels", name="brussels sprouts", temperature=180, time_minutes=12),
        SessionItem(id="broccoli", name="broccoli", temperature=180, time_minutes=8),
        SessionItem(id="salmon", name="salmon", temperature=300, time_minutes=10),
    ]
    print(f"✓ {len(items)} items (salmon's 300C is clamped to {items[-1].temperature}C)\n")

    optimizer = CookingSessionOptimizer()

    # STEP 1: automatic temperature grouping
    print_section("STEP 1: Automatic Temperature Phases")
    auto_result = optimizer.optimize(items)
    print_plan(auto_result, items)

    # STEP 2: the user's own batches, built through the batch manager
    print_section("STEP 2: Manual Batches")
    session = CookingSession(items=[item.model_copy() for item in items])
    manager = BatchManager(session)
    manager.apply_batch_suggestion(manager.auto_suggest_batches())
    extra = manager.create_batch()
    manager.move_item_between_batches("broccoli", session.get_item("broccoli").batch_id, extra.id)
    for batch in session.batches:
        hint = manager.get_batch_temperature_hint(batch.id)
        print(f"Batch {batch.order}: {len(batch.item_ids)} items - {hint.message}")

    manual_result = optimizer.optimize(
        session.items,
        OptimizationOptions(mode=OptimizationMode.MANUAL_BATCHES, batches=session.batches),
    )
    print_plan(manual_result, items, title="MANUAL BATCH PLAN")

    # STEP 3: execute the automatic plan event by event
    print_section("STEP 3: Guided Execution")
    cooking = CookingSession(items=items, phases=auto_result.phases)
    with SessionExecutor(cooking, auto_tick=False) as executor:
        executor.add_listener(lambda old, new: print(f"  [{old.value} -> {new.value}]"))
        executor.start()
        while executor.state == ExecutionState.RUNNING:
            print(f"  Doing: {executor.get_current_event().instruction}")
            executor.complete_event()
        progress = executor.get_progress()
        print(f"\n✓ Session {cooking.status.value}, {progress.percent_complete}% of phases done")


if __name__ == "__main__":
    main()
