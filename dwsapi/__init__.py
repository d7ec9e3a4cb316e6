"""Data Workflow Services resource model, owner labels and workflow admission checks."""

__version__ = "0.1.0"