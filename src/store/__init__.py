"""Environment store layer.

This module holds the key/value stores that ingestion writes into.
It also owns ``$NAME`` expansion against a store's current state.
"""
