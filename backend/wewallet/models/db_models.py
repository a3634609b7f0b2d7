from sqlalchemy import Column, Integer, BigInteger, String, DateTime, Enum as SQLEnum, ForeignKey
from sqlalchemy.orm import relationship, declarative_base
from sqlalchemy.types import TypeDecorator
from datetime import datetime, timezone
from decimal import Decimal, ROUND_DOWN
import enum

Base = declarative_base()

# Money is stored as integer minor units: 1 unit = 1e-8 (satoshi-level)
MONEY_SCALE = 8
MONEY_QUANTUM = Decimal(1).scaleb(-MONEY_SCALE)
MAX_AMOUNT = Decimal("9999999999.99999999")
# Largest value a BigInteger column can hold
MAX_BALANCE = Decimal(2**63 - 1).scaleb(-MONEY_SCALE)


class Money(TypeDecorator):
    """Decimal in Python, BigInteger minor units in the database.

    SQL arithmetic and comparisons on these columns are integer-exact on
    every backend.
    """

    impl = BigInteger
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        units = Decimal(value).scaleb(MONEY_SCALE)
        if units != units.to_integral_value():
            raise ValueError(f"{value} has more than {MONEY_SCALE} decimal places")
        return int(units)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(int(value)).scaleb(-MONEY_SCALE)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# --- Enums --- (Keep these defined first)
class TradeDirection(enum.Enum):
    UP = "UP"
    DOWN = "DOWN"

class TradeStatus(enum.Enum):
    PENDING = "PENDING"
    WON = "WON"
    LOST = "LOST"

class WithdrawStatus(enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

# --- Models --- (Define independent models first, then dependent ones)

class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True) # uuid4 string
    email = Column(String, unique=True, index=True, nullable=True)
    wallet_address = Column(String, unique=True, index=True, nullable=True) # Stored lower-cased
    balance = Column(Money, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    trades = relationship("Trade", back_populates="user")
    withdraw_requests = relationship("WithdrawRequest", back_populates="user")

class Trade(Base):
    __tablename__ = "trades"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    coin = Column(String, nullable=False)
    direction = Column(SQLEnum(TradeDirection), nullable=False)
    amount = Column(Money, nullable=False)
    timeframe_seconds = Column(Integer, nullable=False)
    return_pct = Column(Integer, nullable=False) # Fixed at creation
    status = Column(SQLEnum(TradeStatus), nullable=False, default=TradeStatus.PENDING, index=True)
    payout = Column(Money, nullable=True) # Set once at resolution, 0 for LOST
    created_at = Column(DateTime, default=utcnow, index=True)
    resolved_at = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="trades")

    @property
    def potential_return(self):
        return (self.amount * self.return_pct / 100).quantize(MONEY_QUANTUM, rounding=ROUND_DOWN)

class WithdrawRequest(Base):
    __tablename__ = "withdraw_requests"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Money, nullable=False)
    proof_image = Column(String, nullable=False)
    tx_hash = Column(String, nullable=True)
    status = Column(SQLEnum(WithdrawStatus), nullable=False, default=WithdrawStatus.PENDING, index=True)
    created_at = Column(DateTime, default=utcnow, index=True)
    resolved_at = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="withdraw_requests")
