from .aggregator import EventLogAggregator, OrderProjection, active_orders

__all__ = ["EventLogAggregator", "OrderProjection", "active_orders"]
