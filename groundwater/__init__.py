"""
Groundwater monitoring core — reading storage, aggregation and forecasting.
"""

__version__ = "1.0.0"
