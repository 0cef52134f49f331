"""
Create a user from the command line (e.g. the first global admin). Run from project root:
  python -m taskboard.scripts.create_user EMAIL PASSWORD NAME [admin|user]
Example:
  python -m taskboard.scripts.create_user admin@example.com your-secure-password "Ada Admin" admin
"""
import argparse
import logging
import sys

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from taskboard.core.database import session_scope
from taskboard.core.errors import TaskboardError
from taskboard.models import Role
from taskboard.models.enums import GlobalRoleName
from taskboard.schemas.auth import RegisterRequest
from taskboard.services import users as user_service
from taskboard.services.roles import seed_default_roles

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a Taskboard user.")
    parser.add_argument("email", help="Login email")
    parser.add_argument("password", help="Password")
    parser.add_argument("name", help="Display name")
    parser.add_argument(
        "role",
        nargs="?",
        default=GlobalRoleName.USER.value,
        choices=[r.value for r in GlobalRoleName],
        help="Global role (default: user)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    try:
        data = RegisterRequest(name=args.name, email=args.email, password=args.password)
    except ValidationError as e:
        for error in e.errors():
            print(f"{'.'.join(str(p) for p in error['loc'])}: {error['msg']}", file=sys.stderr)
        return 1

    try:
        with session_scope() as db:
            seed_default_roles(db)
            user = user_service.register_user(db, data)
            if args.role != GlobalRoleName.USER.value:
                role = db.query(Role).filter(Role.name == GlobalRoleName(args.role)).one()
                user.role_id = role.id
                db.commit()
            user_id = user.id
    except TaskboardError as e:
        print(e.message, file=sys.stderr)
        return 1
    except SQLAlchemyError:
        logger.exception("Could not create user")
        return 1

    logger.info("Created user %s (%s) with role '%s'", user_id, data.email, args.role)
    return 0


if __name__ == "__main__":
    sys.exit(main())
