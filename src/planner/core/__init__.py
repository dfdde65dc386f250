"""Core state layer: local idea store, remote sync client and aggregation."""
