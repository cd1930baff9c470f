"""SQLModel table definitions and database initialization."""

from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Field, SQLModel


class Trade(SQLModel, table=True):
    """Ledger row for one executed trade. Rows are only ever inserted."""

    __tablename__ = "trades"

    id: int | None = Field(default=None, primary_key=True)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    trade_type: str  # 'BUY' or 'SELL'
    instrument_id: str = Field(index=True)
    instrument_name: str
    instrument_code: str
    market: str
    currency: str
    quantity: int
    price: float
    total_amount: float


async def init_db(db_path: str | None = None) -> AsyncEngine:
    """Create the async engine and ensure all tables exist.

    ``None`` (or ``":memory:"``) keeps the ledger in process memory; a single shared
    connection is used so every session sees the same database.
    """
    if db_path is None or db_path == ":memory:":
        engine = create_async_engine(
            "sqlite+aiosqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}")

    # Only creates missing tables
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    return engine
