"""
Infrastructure layer: configuration, exchange clients and factories.
"""
