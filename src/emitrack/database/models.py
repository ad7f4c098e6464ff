"""SQLAlchemy models for emitrack database."""

from datetime import datetime, UTC
from sqlalchemy import (
    JSON,
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class EMI(Base):
    """EMI (installment loan, subscription or one-off purchase) model."""

    __tablename__ = "emis"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False)
    name = Column(String(100), nullable=False)
    type = Column(String, nullable=False, default="other")
    payment_type = Column(String, nullable=False, default="emi")
    emi_amount = Column(Numeric(12, 2), nullable=False)
    total_installments = Column(Integer, nullable=True)
    paid_installments = Column(Integer, nullable=False, default=0)
    remaining_amount = Column(Numeric(12, 2), nullable=False)
    start_date = Column(Date, nullable=False)
    next_due_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    status = Column(String, nullable=False, default="active")
    notes = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_emis_user_status", "user_id", "status"),
        Index("ix_emis_user_next_due", "user_id", "next_due_date"),
    )

    # Relationships
    transactions = relationship("Transaction", back_populates="emi")


class Transaction(Base):
    """Ledger transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False)
    type = Column(String, nullable=False, default="expense")
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(String(200), nullable=False)
    date = Column(Date, nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    payment_method = Column(String, nullable=False, default="other")
    notes = Column(String(500), nullable=True)
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurring_frequency = Column(String, nullable=False, default="monthly")
    recurring_next_due_date = Column(Date, nullable=True)
    emi_id = Column(Integer, ForeignKey("emis.id"), nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_transactions_user_date", "user_id", "date"),
        Index("ix_transactions_user_type", "user_id", "type"),
    )

    # Relationships
    emi = relationship("EMI", back_populates="transactions")


def create_session_factory(database_url: str, echo: bool = False) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=echo)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
