#!/usr/bin/env python3
"""
Log Expiry Backfill Script

Logs written before expires_at was stored rely on a created_at + 30 days
fallback when deciding whether they still count. This script stamps that
value onto every such row so the fallback stops being needed, then refreshes
the snapshot of each affected problem.

Usage:
    python backfill_log_expiry.py            # apply
    python backfill_log_expiry.py --dry-run  # report only
"""

import argparse
import logging
import sys
from typing import Dict

from sqlalchemy.orm import Session

from leetlog.database import SessionLocal, get_database_type, init_db
from leetlog.logging_config import setup_logging
from leetlog.models import Log
from leetlog.services.readiness_service import LEGACY_LOG_LIFETIME
from leetlog.services.snapshot_service import get_snapshot_service

logger = logging.getLogger("backfill_log_expiry")


def backfill_expiry(db: Session, dry_run: bool = False) -> Dict[str, int]:
    """
    Set expires_at on legacy logs.

    Returns dict with:
    - logs: number of logs missing expires_at
    - user_problems: number of problems whose snapshot was refreshed
    """
    legacy_logs = db.query(Log).filter(Log.expires_at.is_(None)).all()
    affected = sorted({log.user_problem_id for log in legacy_logs})

    result = {"logs": len(legacy_logs), "user_problems": len(affected)}
    if dry_run or not legacy_logs:
        return result

    for log in legacy_logs:
        log.expires_at = log.created_at + LEGACY_LOG_LIFETIME
    db.commit()

    snapshot_service = get_snapshot_service()
    for user_problem_id in affected:
        snapshot_service.refresh(db, user_problem_id)

    return result


def main() -> int:
    parser = argparse.ArgumentParser(description="Stamp expires_at on legacy logs")
    parser.add_argument("--dry-run", action="store_true", help="Only report what would change")
    args = parser.parse_args()

    setup_logging()
    logger.info("Database: %s", get_database_type())
    init_db()

    db = SessionLocal()
    try:
        result = backfill_expiry(db, dry_run=args.dry_run)
    finally:
        db.close()

    action = "Would update" if args.dry_run else "Updated"
    logger.info(
        "%s %d legacy logs across %d problems",
        action, result["logs"], result["user_problems"],
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
