"""
Delivery tracking core.

Live view of an order's delivery progress:
- Shared socket.io connection multiplexed across tracked orders
- Pull snapshots from the orders API
- Route geometry decoding and ETA/distance formatting
"""

__version__ = "1.0.0"
