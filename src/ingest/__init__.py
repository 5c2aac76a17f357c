"""Env-file ingestion pipeline.

This module scans env-files, parses declarations on a worker pool,
and applies the results to an environment store in file order.
"""
