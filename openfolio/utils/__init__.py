"""Shared helpers: structured logging and input validation."""
