"""ValueFlows foundation: baseline reconciliation and referential validation."""

__version__ = "0.1.0"
