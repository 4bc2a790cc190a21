from __future__ import annotations

import logging

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def log_if_foreign(db: Session, model, record_id: int, user_id: int) -> None:
    """Warn when a lookup missed because the record belongs to someone else."""
    owner_id = db.query(model.user_id).filter(model.id == record_id).scalar()
    if owner_id is not None and int(owner_id) != int(user_id):
        logger.warning(
            "Access denied (owner_mismatch): user_id=%s resource=%s id=%s",
            user_id,
            model.__tablename__,
            record_id,
        )
