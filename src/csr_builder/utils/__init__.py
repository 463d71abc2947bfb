"""Utilities module.

This module provides shared exception types and error reporting helpers.
"""
