"""
Application layer: subscription lifecycle and the market price service.
"""
