"""
Background job to reconcile denormalized reservation counters

Run periodically (e.g. via cron) or after an incident:

    python -m dinebook.scripts.reconcile_counters
"""

import sys

from sqlmodel import Session
import structlog

from dinebook.core.database import engine
from dinebook.services.reconciliation import reconcile_counters

logger = structlog.get_logger(__name__)


def main():
    """Main entry point for reconciliation job"""
    logger.info("=" * 80)
    logger.info("Starting Counter Reconciliation Job")
    logger.info("=" * 80)

    try:
        with Session(engine) as session:
            results = reconcile_counters(session)

            logger.info("=" * 80)
            logger.info("Counter Reconciliation Complete")
            logger.info(f"Results: {results}")
            logger.info("=" * 80)

    except Exception as e:
        logger.error(f"Fatal error in reconciliation job: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
