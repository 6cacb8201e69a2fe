"""specharvest: incremental, budget-governed catalog crawler."""

__version__ = "0.1.0"
