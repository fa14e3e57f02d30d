"""
Database models for the Bet Ledger
SQLAlchemy ORM with PostgreSQL
"""

from sqlalchemy import (
    create_engine,
    Column,
    Integer,
    String,
    Float,
    DateTime,
    Date,
    Text,
)
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from datetime import datetime
import os
from dotenv import load_dotenv

# Load .env before DATABASE_URL is read
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "postgresql://postgres@127.0.0.1:5432/bet_ledger")

_engine_kwargs = {"pool_pre_ping": True, "echo": False}
if DATABASE_URL.startswith("sqlite"):
    # Single shared connection so in-memory databases survive across sessions
    _engine_kwargs.update(connect_args={"check_same_thread": False}, poolclass=StaticPool)

engine = create_engine(DATABASE_URL, **_engine_kwargs)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# Dependency for FastAPI
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


class Bet(Base):
    """A single recorded bet, fully normalized before it is written"""

    __tablename__ = "bets"

    id = Column(Integer, primary_key=True, index=True)
    owner = Column(String, nullable=False, index=True)  # API user identifier, e.g. "user1"

    # What was bet
    fixture = Column(Text, nullable=False)
    selection = Column(Text, nullable=False)  # canonical description, e.g. "Saka Shots Over 1.5"
    bookmaker = Column(String(32), nullable=False, index=True)
    bet_type = Column(String(32), nullable=False, index=True)  # "Player Prop", "Accumulator", ...
    player_prop_market = Column(String(64))  # only for Player Prop bets

    # Money
    stake_type = Column(String(16), nullable=False, default="NORMAL")  # NORMAL | FREE
    stake = Column(Float, nullable=False)
    odds = Column(Float, nullable=False)  # decimal odds, 5dp
    potential_return = Column(Float, nullable=False)  # always stake * odds

    # Settlement
    result = Column(String(16), nullable=False, default="OPEN", index=True)  # OPEN | WON | LOST | VOID
    cash_out_value = Column(Float)  # total returned on a cash-out; VOID only
    profit = Column(Float)  # NULL = undetermined (open, or cash-out unknown)

    placed_at = Column(Date, nullable=False, index=True)  # calendar day (UTC)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_raw(self) -> dict:
        """Payload-shaped view of the stored row, fed to the normalizer on update."""
        return {
            "fixture": self.fixture,
            "selection": self.selection,
            "bookmaker": self.bookmaker,
            "stakeType": self.stake_type,
            "betType": self.bet_type,
            "playerPropMarket": self.player_prop_market,
            "stake": self.stake,
            "odds": self.odds,
            "result": self.result,
            "cashOutValue": self.cash_out_value,
            "placedAt": self.placed_at,
        }


# Create all tables
def init_db():
    """Initialize database tables"""
    Base.metadata.create_all(bind=engine)
    print("✅ Database tables created")


if __name__ == "__main__":
    init_db()
