"""
OKX exchange components: instruments REST client and websocket transport.
"""

from .rest_client import OkxInstrumentClient
from .websocket_transport import WebsocketStreamSocket, WebsocketTransport

__all__ = [
    "OkxInstrumentClient",
    "WebsocketStreamSocket",
    "WebsocketTransport",
]
