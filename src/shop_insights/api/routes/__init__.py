"""
API route modules.
"""

from . import health, tenants, ingest, metrics

__all__ = ["health", "tenants", "ingest", "metrics"]
