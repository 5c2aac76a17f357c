"""Env-file syntax layer.

This module turns raw declaration text into validated key/value pairs.
It has no knowledge of files, workers, or environment stores.
"""
