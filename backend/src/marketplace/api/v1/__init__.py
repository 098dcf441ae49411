"""API v1 routers."""

from marketplace.api.v1 import bids, items

__all__ = ["bids", "items"]
