from shipgate.models.order_history import HistoryAction, OrderHistory

__all__ = ["HistoryAction", "OrderHistory"]
