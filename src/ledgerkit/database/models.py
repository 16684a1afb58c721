"""SQLAlchemy models for ledgerkit database."""

from datetime import datetime, UTC
from decimal import Decimal
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Boolean,
    Enum,
    UniqueConstraint,
    create_engine,
    event,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session
from sqlalchemy.types import TypeDecorator

from ledgerkit.domain.entities import AccountSubType, AccountType, EntryStatus

Base = declarative_base()


class DecimalString(TypeDecorator):
    """Exact decimal stored as text.

    SQLite has no native decimal type and round-trips NUMERIC through
    floats, so amounts are persisted as their string representation.
    """

    impl = String(64)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(Decimal(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value)


def _enum_column(enum_cls, length: int):
    return Enum(
        enum_cls,
        values_callable=lambda members: [member.value for member in members],
        native_enum=False,
        length=length,
    )


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Account(Base):
    """Chart-of-accounts model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    code = Column(String(20), unique=True, nullable=False)
    name = Column(String(200), nullable=False)
    account_type = Column(_enum_column(AccountType, 20), nullable=False)
    sub_type = Column(_enum_column(AccountSubType, 40), nullable=False)
    parent_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    level = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    description = Column(String(500), nullable=True)
    balance = Column(DecimalString, default=Decimal("0"), nullable=False)
    opening_balance = Column(DecimalString, default=Decimal("0"), nullable=False)
    currency = Column(String(3), default="USD", nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, nullable=True)
    created_by = Column(String, nullable=True)
    updated_by = Column(String, nullable=True)

    # Relationships
    parent = relationship("Account", remote_side=[id], backref="children")
    journal_lines = relationship("JournalLine", back_populates="account")


class JournalEntry(Base):
    """Journal entry header model."""

    __tablename__ = "journal_entries"

    id = Column(Integer, primary_key=True)
    journal_number = Column(String(32), unique=True, nullable=False)
    entry_date = Column(Date, nullable=False)
    narration = Column(String(500), nullable=False)
    reference = Column(String(100), nullable=True)
    status = Column(_enum_column(EntryStatus, 10), default=EntryStatus.DRAFT, nullable=False)
    total_debit = Column(DecimalString, default=Decimal("0"), nullable=False)
    total_credit = Column(DecimalString, default=Decimal("0"), nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, nullable=True)
    created_by = Column(String, nullable=True)
    updated_by = Column(String, nullable=True)
    posted_at = Column(DateTime, nullable=True)
    posted_by = Column(String, nullable=True)
    reversal_entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=True)
    original_entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=True)

    # Relationships
    lines = relationship(
        "JournalLine",
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by="JournalLine.position",
    )


class JournalLine(Base):
    """Journal line model, owned by its entry."""

    __tablename__ = "journal_lines"

    id = Column(Integer, primary_key=True)
    entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=False)
    position = Column(Integer, nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    account_code = Column(String(20), nullable=False)
    account_name = Column(String(200), nullable=False)
    description = Column(String(200), nullable=True)
    debit_amount = Column(DecimalString, default=Decimal("0"), nullable=False)
    credit_amount = Column(DecimalString, default=Decimal("0"), nullable=False)

    __table_args__ = (UniqueConstraint("entry_id", "position", name="uq_entry_line_position"),)

    # Relationships
    entry = relationship("JournalEntry", back_populates="lines")
    account = relationship("Account", back_populates="journal_lines")


class SequenceCounter(Base):
    """Named monotonic counter, incremented under a row lock."""

    __tablename__ = "sequence_counters"

    name = Column(String(50), primary_key=True)
    current_value = Column(Integer, default=0, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Sessions are opened per operation and may run on worker threads
        connect_args = {"check_same_thread": False, "timeout": 30}
    engine = create_engine(database_url, echo=False, connect_args=connect_args)
    if database_url.startswith("sqlite"):
        _begin_immediate_transactions(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)


def _begin_immediate_transactions(engine) -> None:
    """Make every SQLite transaction hold the write lock from its first statement.

    pysqlite defers BEGIN until the first write; balance and counter reads must
    already run under the lock when several processes share one file.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")
