"""HTTP service: FastAPI app factory, routers and the scan pulse hub."""

from uid_ops.api.scan_events import ScanEventHub, Subscription
from uid_ops.api.server import create_app

__all__ = [
    "ScanEventHub",
    "Subscription",
    "create_app",
]
