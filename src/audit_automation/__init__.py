"""Transaction audit automation: rule evaluation and spend aggregation."""

__version__ = "0.1.0"
