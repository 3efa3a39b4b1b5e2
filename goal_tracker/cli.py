"""
Goal Tracker CLI

Usage:
    python -m goal_tracker.cli --create "Read every day" --days 30
    python -m goal_tracker.cli --mark
    python -m goal_tracker.cli --status
    python -m goal_tracker.cli --delete
    python -m goal_tracker.cli --daemon
    python -m goal_tracker.cli --daemon --config tracker.yaml
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from typing import Optional

from .app import TrackerApp
from .core.config import Config, BACKENDS
from .core.exceptions import GoalTrackerError
from .goals.models import Goal
from .reminders.notifications import InMemoryNotifier, LoggingNotifier
from .reminders.timers import AsyncioTimerFacility, InMemoryTimerFacility


def load_config(config_path: Optional[str], backend: Optional[str]) -> Config:
    config = Config.from_file(config_path) if config_path else Config.from_env()
    if backend:
        config.backend = backend
    return config


def format_status(goal: Optional[Goal], today) -> str:
    """Human-readable goal summary."""
    if goal is None:
        return "No active goal. Create one with --create NAME --days N"

    marked = "✅ marked" if goal.is_marked(today) else "⏳ not marked yet"
    return "\n".join([
        f"🎯 {goal.name}",
        f"   Progress: {goal.progress_percent}%",
        f"   Done: {goal.days_completed} of {goal.total_days} days",
        f"   Started: {goal.start_date.isoformat()}",
        f"   Today: {marked}",
    ])


def _command_app(config: Config) -> TrackerApp:
    """App for one-shot commands: nothing is scheduled from here."""
    return TrackerApp.from_config(config, InMemoryTimerFacility(), LoggingNotifier())


async def create_cmd(config: Config, name: str, days: int) -> None:
    app = _command_app(config)
    goal = await app.create_goal(name, days)
    print(f"✅ Created goal: {goal.name} ({goal.total_days} days)")


async def mark_cmd(config: Config) -> None:
    notifier = InMemoryNotifier()
    app = TrackerApp.from_config(config, InMemoryTimerFacility(), notifier)

    if await app.get_goal() is None:
        print("❌ No active goal")
        sys.exit(1)

    if await app.mark_today():
        message = notifier.delivered[-1].body if notifier.delivered else "Marked"
        print(f"✅ {message}")
    else:
        print("⏭️  Today is already marked")


async def status_cmd(config: Config) -> None:
    app = _command_app(config)
    goal = await app.get_goal()
    print(format_status(goal, datetime.now().date()))


async def delete_cmd(config: Config) -> None:
    app = _command_app(config)
    await app.delete_goal()
    print("🗑️  Goal deleted")


async def daemon_mode(config: Config) -> None:
    """Run reminders until interrupted."""
    app = TrackerApp.from_config(config, AsyncioTimerFacility(), LoggingNotifier())

    print("🗓️  Goal Tracker Daemon")
    print(f"   Backend: {config.backend}")
    print(f"   Reminders: {', '.join(slot.label for slot in config.reminder_slots)}")
    print("   Press Ctrl+C to stop")
    print("=" * 50)

    try:
        async with app:
            while True:
                await asyncio.sleep(3600)
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    finally:
        print("\n👋 Daemon stopped")


def main():
    parser = argparse.ArgumentParser(
        description="Goal Tracker CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Start a 30 day goal
    python -m goal_tracker.cli --create "Read every day" --days 30

    # Mark today and show progress
    python -m goal_tracker.cli --mark
    python -m goal_tracker.cli --status

    # Run the reminder daemon (14:00, 17:00, 20:00 by default)
    python -m goal_tracker.cli --daemon
        """,
    )

    parser.add_argument("--create", type=str, metavar="NAME", help="Create a goal with this name")
    parser.add_argument("--days", type=int, default=30, help="Target number of days for --create (default: 30)")
    parser.add_argument("--mark", "-m", action="store_true", help="Mark today as done")
    parser.add_argument("--status", "-s", action="store_true", help="Show goal progress")
    parser.add_argument("--delete", action="store_true", help="Delete the goal")
    parser.add_argument("--daemon", "-d", action="store_true", help="Run the reminder daemon")
    parser.add_argument("--config", "-c", type=str, help="YAML config file")
    parser.add_argument("--backend", choices=BACKENDS, help="Override the storage backend")

    args = parser.parse_args()

    config = load_config(args.config, args.backend)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.create:
            asyncio.run(create_cmd(config, args.create, args.days))
        elif args.mark:
            asyncio.run(mark_cmd(config))
        elif args.delete:
            asyncio.run(delete_cmd(config))
        elif args.daemon:
            asyncio.run(daemon_mode(config))
        elif args.status:
            asyncio.run(status_cmd(config))
        else:
            parser.print_help()
            sys.exit(1)
    except ValueError as e:
        print(f"❌ {e}")
        sys.exit(1)
    except GoalTrackerError as e:
        print(f"❌ Store error: {e}")
        sys.exit(2)


if __name__ == "__main__":
    main()
