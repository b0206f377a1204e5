"""
Order history model

Append-only record of rate fetches and label purchases per order.
"""
from datetime import datetime, timezone
import enum

from sqlalchemy import Column, DateTime, Enum as SQLEnum, Float, Index, Integer, String, Text

from shipgate.core.database import Base


class HistoryAction(str, enum.Enum):
    RATES = "rates"
    PURCHASE = "purchase"


class OrderHistory(Base):
    __tablename__ = "orders_history"
    __table_args__ = (
        Index("idx_order_id", "order_id"),
        Index("idx_created_at", "created_at"),
        Index("idx_action_type", "action_type"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(100), nullable=False)
    action_type = Column(SQLEnum(HistoryAction, values_callable=lambda e: [m.value for m in e]), nullable=False)

    provider = Column(String(50), nullable=True)
    carrier = Column(String(100), nullable=True)
    service = Column(String(200), nullable=True)
    price = Column(Float, nullable=True)
    currency = Column(String(3), nullable=True)
    tracking_number = Column(String(100), nullable=True)
    label_url = Column(Text, nullable=True)

    # JSON strings
    request_data = Column(Text, nullable=False)
    response_data = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "order_id": self.order_id,
            "action_type": self.action_type.value if self.action_type else None,
            "provider": self.provider,
            "carrier": self.carrier,
            "service": self.service,
            "price": self.price,
            "currency": self.currency,
            "tracking_number": self.tracking_number,
            "label_url": self.label_url,
            "request_data": self.request_data,
            "response_data": self.response_data,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
