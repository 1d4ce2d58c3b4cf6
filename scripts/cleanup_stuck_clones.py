"""
Remediate clone jobs that stopped heartbeating.

Usage examples:
    # Show what would be promoted or deleted
    python -m scripts.cleanup_stuck_clones --dry-run

    # Apply with a longer staleness window
    python -m scripts.cleanup_stuck_clones --threshold-seconds 300
"""
import argparse
import asyncio
from datetime import timedelta

from liftlog.config.settings import get_settings
from liftlog.core.logging import configure_logging
from liftlog.db.database import async_session_maker, close_engine, init_db
from liftlog.services.copy_status import sweep_stuck_clones


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Clean up stuck program clone jobs")
    parser.add_argument(
        "--threshold-seconds",
        type=int,
        default=get_settings().stuck_clone_threshold_seconds,
        help="Heartbeat age after which a clone counts as stuck",
    )
    parser.add_argument("--dry-run", action="store_true", help="Report only, change nothing")
    return parser


async def run(args: argparse.Namespace) -> None:
    await init_db()
    try:
        actions = await sweep_stuck_clones(
            async_session_maker,
            timedelta(seconds=args.threshold_seconds),
            dry_run=args.dry_run,
        )
    finally:
        await close_engine()

    if not actions:
        print("No stuck clones found.")
        return
    for a in actions:
        state = "applied" if a.applied else ("would apply" if args.dry_run else "skipped (row changed)")
        print(f"{a.program_type.value:8} {a.program_id}  {a.copy_status:28} {a.action:9} {state}")


def main():
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args()
    configure_logging("cleanup")
    asyncio.run(run(args))


if __name__ == "__main__":
    main()
