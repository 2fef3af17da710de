"""Run the monthly payroll pass outside Flask (cron / manual).

Example:
    python scripts/run_payroll.py --month 3 --year 2024
"""
from __future__ import annotations

import argparse
import importlib
import json
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.hrm_core.hrm_core.container import build_container
from src.hrm_core.hrm_core.core.exceptions import DirectoryUnavailable, ValidationError


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create one salary record per active employee for a period.")
    parser.add_argument("--month", type=int, required=True)
    parser.add_argument("--year", type=int, required=True)
    parser.add_argument("--actor", default="system", help="actor id written to the audit log")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    container = build_container(db_config=settings.DB_CONFIG, settings=settings)
    try:
        result = container.payroll_batch_runner.run(args.month, args.year, actor_id=args.actor)
    except (ValidationError, DirectoryUnavailable) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    summary = result.to_dict()
    print(
        json.dumps(
            {
                "month": summary["month"],
                "year": summary["year"],
                "created_count": summary["created_count"],
                "skipped_count": summary["skipped_count"],
                "failed": summary["failed"],
            },
            indent=2,
        )
    )
    return 2 if result.failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
