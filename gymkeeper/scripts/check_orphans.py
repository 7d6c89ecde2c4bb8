"""
Report ledger rows whose member no longer exists

Reports skip these rows on their own; this script lists them so they can be
looked at.

    python -m gymkeeper.scripts.check_orphans
"""

import sys

from sqlmodel import Session, select
import structlog

from gymkeeper.core.database import session_factory
from gymkeeper.models.attendance import Attendance
from gymkeeper.models.member import Member
from gymkeeper.models.payment import Payment

logger = structlog.get_logger(__name__)


def find_orphans(session: Session) -> dict:
    """Attendance and payment rows with no member in the same tenant"""
    found = {}
    for label, model in (("attendance", Attendance), ("payments", Payment)):
        rows = session.exec(
            select(model)
            .join(
                Member,
                (Member.id == model.member_id) & (Member.tenant_id == model.tenant_id),
                isouter=True,
            )
            .where(Member.id == None)  # noqa: E711
        ).all()

        for row in rows:
            logger.warning(f"Orphaned {label} record {row.id} (tenant {row.tenant_id}, member {row.member_id})")
        found[label] = len(rows)

    return found


def main():
    try:
        with session_factory() as session:
            results = find_orphans(session)
    except Exception as e:
        logger.error(f"Orphan check failed: {e}")
        sys.exit(1)

    logger.info(f"Orphan check complete: {results}")


if __name__ == "__main__":
    main()
