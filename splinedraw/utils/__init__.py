"""Shared utilities: filesystem helpers, logging setup, input schemas."""
