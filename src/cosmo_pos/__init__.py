"""
Core of the Cosmo POS terminal: remote store adapter, local state cache,
realtime reconciliation, checkout and order workflow.
"""

__version__ = "0.1.0"
