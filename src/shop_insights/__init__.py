"""
Shop Insights

Multi-tenant analytics backend that periodically pulls products, customers and
orders from a Shopify-style Admin API, stores them in a relational database and
serves aggregate metrics to the dashboard.
"""

__version__ = "1.0.0"
__author__ = "Shop Insights Team"
