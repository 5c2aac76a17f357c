"""Shared foundations.

This module holds constants, typed models, configuration, logging
and the error hierarchy used by every other Envpipe package.
"""
