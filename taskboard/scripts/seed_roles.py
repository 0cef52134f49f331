"""
Seed the default global roles ('admin': read/write/delete, 'user': read). Run from project root:
  python -m taskboard.scripts.seed_roles [--reset]
"""
import argparse
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from taskboard.core.database import session_scope
from taskboard.models import Role
from taskboard.services.roles import seed_default_roles

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed default Taskboard roles.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Restore permissions and descriptions of existing default roles",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    try:
        with session_scope() as db:
            created = seed_default_roles(db, reset=args.reset)
            for role in db.query(Role).order_by(Role.id).all():
                logger.info("  - %s: %s", role.name.value, ", ".join(role.permissions))
    except SQLAlchemyError:
        logger.exception("Error seeding roles")
        return 1
    logger.info("Roles seeded (%s created).", created)
    return 0


if __name__ == "__main__":
    sys.exit(main())
