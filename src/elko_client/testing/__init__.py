# src/elko_client/testing/__init__.py
"""In-memory fakes for exercising elko_client without a server."""
