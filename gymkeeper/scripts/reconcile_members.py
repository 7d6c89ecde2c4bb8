"""
One-shot member status reconciliation

For deployments that drive jobs from cron instead of the in-process
scheduler (run with SCHEDULER_ENABLED=false):

    0 0 * * *  python -m gymkeeper.scripts.reconcile_members
    0 0 * * 0  python -m gymkeeper.scripts.reconcile_members --remind
"""

import argparse
import asyncio
import sys

import structlog

from gymkeeper.core.clock import get_clock
from gymkeeper.core.database import session_factory
from gymkeeper.core.events import event_bus, log_expiring_memberships
from gymkeeper.services.reconciliation import MembershipJobs

logger = structlog.get_logger(__name__)


async def run(remind: bool) -> dict:
    jobs = MembershipJobs(session_factory, get_clock(), event_bus)
    result = await jobs.reconcile()
    summary = result.to_dict()

    if remind:
        event_bus.subscribe("MembershipsExpiringSoon", log_expiring_memberships)
        summary["reminded_tenants"] = await jobs.remind_expiring()

    return summary


def main(argv=None):
    """Main entry point for the reconciliation job"""
    parser = argparse.ArgumentParser(description="Reconcile member statuses with expiry dates")
    parser.add_argument("--remind", action="store_true", help="also publish expiring-soon reminders")
    args = parser.parse_args(argv)

    logger.info("="*80)
    logger.info("Starting Member Status Reconciliation")
    logger.info("="*80)

    try:
        results = asyncio.run(run(args.remind))
    except Exception as e:
        logger.error(f"Fatal error in reconciliation job: {e}")
        sys.exit(1)

    logger.info("="*80)
    logger.info("Member Status Reconciliation Complete")
    logger.info(f"Results: {results}")
    logger.info("="*80)


if __name__ == "__main__":
    main()
