"""
Market Data Models - Core market data structures
================================================
Pure data models for OKX tickers and subscription frames.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


TICKERS_CHANNEL = "tickers"


class MarketType(str, Enum):
    """Trading categories partitioning the instrument universe"""
    SPOT = "SPOT"
    MARGIN = "MARGIN"
    SWAP = "SWAP"
    FUTURES = "FUTURES"
    OPTION = "OPTION"

    @classmethod
    def parse(cls, value: Union["MarketType", str]) -> "MarketType":
        """Accept a member or a case-insensitive market name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown market type '{value}'. Valid options: {valid}") from None


class CurrencyEnum(str, Enum):
    """Common second-side currencies used to filter instrument pages"""
    USDT = "USDT"
    ETH = "ETH"
    BTC = "BTC"
    EUR = "EUR"
    GBP = "GBP"
    TRY = "TRY"


class SubscriptionOp(str, Enum):
    SUBSCRIBE = "subscribe"
    UNSUBSCRIBE = "unsubscribe"


class SubscriptionArg(BaseModel):
    """Single (channel, instrument) pair of a subscription frame"""

    model_config = ConfigDict(populate_by_name=True)

    channel: Literal["tickers"] = Field(default=TICKERS_CHANNEL)
    inst_id: str = Field(..., alias="instId", description="Uppercased instrument id")


class SubscriptionMessage(BaseModel):
    """
    Subscribe/unsubscribe frame sent to the stream.

    The same instance is reused for teardown: ``op`` is flipped to
    ``unsubscribe`` in place before the close frame is sent.
    """

    model_config = ConfigDict(validate_assignment=True)

    op: SubscriptionOp = Field(default=SubscriptionOp.SUBSCRIBE)
    args: List[SubscriptionArg] = Field(default_factory=list)

    @classmethod
    def for_instruments(cls, instruments: List[str]) -> "SubscriptionMessage":
        return cls(
            op=SubscriptionOp.SUBSCRIBE,
            args=[SubscriptionArg(instId=inst.upper()) for inst in instruments],
        )

    @property
    def instruments(self) -> List[str]:
        return [arg.inst_id for arg in self.args]

    def to_wire(self) -> str:
        """Compact JSON text in the exchange's field names."""
        return self.model_dump_json(by_alias=True)


class TickerData(BaseModel):
    """Ticker snapshot for one instrument; every numeric field is text-encoded"""

    model_config = ConfigDict(extra="allow")

    instType: Optional[str] = None
    instId: str
    last: Optional[str] = None
    lastSz: Optional[str] = None
    askPx: Optional[str] = None
    askSz: Optional[str] = None
    bidPx: Optional[str] = None
    bidSz: Optional[str] = None
    open24h: Optional[str] = None
    high24h: Optional[str] = None
    low24h: Optional[str] = None
    sodUtc0: Optional[str] = None
    sodUtc8: Optional[str] = None
    volCcy24h: Optional[str] = None
    vol24h: Optional[str] = None
    ts: Optional[str] = None


@dataclass
class ActiveChannel:
    """The one open stream: its socket plus the message it subscribed with"""
    socket: Any
    message: SubscriptionMessage
    opened_at: float = field(default=0.0)
