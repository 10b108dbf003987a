"""Run the storage retention cleanup once from the command line.

Example (from cron):
    0 3 * * * cd /srv/storage-retention && python -m retention_api.scripts.cleanup_storage
"""

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from retention_api.core.exceptions import CleanupInProgressError, ValidationError  # noqa: E402
from retention_api.core.log_config import setup_logging  # noqa: E402
from retention_api.retention.presets import build_retention_config  # noqa: E402
from retention_api.retention.schemas import serialize_report  # noqa: E402
from retention_api.retention.services.orchestrator import CleanupOrchestrator  # noqa: E402
from retention_api.retention.services.run_lock import cleanup_run_lock  # noqa: E402


def main(argv: list[str] | None = None) -> int:
    """Return 0 for a clean run, 1 for errors, failed listings or an incomplete run, 2 for bad arguments."""
    import argparse

    parser = argparse.ArgumentParser(description="Delete expired files from storage buckets")
    parser.add_argument(
        "--preset",
        choices=["test", "aggressive", "production"],
        help="Named retention window (default: STORAGE_CLEANUP_PRESET)",
    )
    parser.add_argument(
        "--max-age-minutes",
        type=float,
        help="Explicit retention window in minutes; overrides --preset",
    )
    parser.add_argument(
        "--bucket",
        action="append",
        dest="buckets",
        help="Bucket to sweep; repeat for several (default: STORAGE_CLEANUP_BUCKETS)",
    )
    parser.add_argument("--dry-run", action="store_true", help="Only report what would be deleted")
    parser.add_argument(
        "--deadline-seconds",
        type=float,
        help="Overall time budget (default: STORAGE_CLEANUP_DEADLINE_SECONDS)",
    )
    parser.add_argument(
        "--lock",
        action="store_true",
        help="Take the Redis advisory lock shared with the API and Celery runs",
    )
    args = parser.parse_args(argv)

    try:
        config = build_retention_config(
            preset=args.preset,
            max_age_minutes=args.max_age_minutes,
            bucket_names=args.buckets,
            dry_run=args.dry_run or None,
            deadline_seconds=args.deadline_seconds,
        )
    except ValidationError as e:
        print(f"❌ {e.message}", file=sys.stderr)
        return 2

    try:
        if args.lock:
            with cleanup_run_lock():
                report = CleanupOrchestrator().run(config)
        else:
            report = CleanupOrchestrator().run(config)
    except CleanupInProgressError as e:
        print(f"⚠️ {e.message}", file=sys.stderr)
        return 1

    print(json.dumps(serialize_report(report), indent=2))
    return 0 if report.succeeded else 1


if __name__ == "__main__":
    setup_logging(stream=sys.stderr)
    sys.exit(main())
