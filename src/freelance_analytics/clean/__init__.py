"""Cleaning utilities for stored records.

Provides functions to normalize raw proposal/earning/message rows, parse
timestamps and numbers, and validate rows into typed Pydantic records.
"""
