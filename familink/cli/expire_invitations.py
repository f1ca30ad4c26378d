import logging
import sys

from familink.config import settings
from familink.database import SessionLocal
from familink.logging_config import setup_logging
from familink.services.invitations import expire_due

logger = logging.getLogger(__name__)


def main() -> int:
    setup_logging(settings.log_level)

    db = SessionLocal()
    try:
        expired = expire_due(db)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Invitation sweep failed")
        return 1
    finally:
        db.close()

    print(f"Expired {expired} invitation(s).")
    return 0


if __name__ == "__main__":
    sys.exit(main())
