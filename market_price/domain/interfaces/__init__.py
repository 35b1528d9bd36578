"""
Domain Interfaces - Ports for external collaborators
"""

from .market_data import IInstrumentFetcher, IStreamSocket, IStreamTransport, FrameHandler, OpenHandler

__all__ = ['IInstrumentFetcher', 'IStreamSocket', 'IStreamTransport', 'FrameHandler', 'OpenHandler']
