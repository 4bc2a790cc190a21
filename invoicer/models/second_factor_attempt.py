from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint

from invoicer.core.database import Base


class SecondFactorAttempt(Base):
    """Failed 2FA codes per user; one row while a streak of failures is open."""

    __tablename__ = "second_factor_attempts"
    __table_args__ = (
        UniqueConstraint("user_id", name="uq_second_factor_attempts_user_id"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    failed_count = Column(Integer, nullable=False, default=0)
    # naive UTC
    first_failed_at = Column(DateTime, nullable=True)
    last_failed_at = Column(DateTime, nullable=True)
    locked_until = Column(DateTime, nullable=True)
