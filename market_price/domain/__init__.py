"""
Domain layer: market data models, collaborator interfaces and the currency repository.
"""
