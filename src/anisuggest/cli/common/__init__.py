"""Shared CLI helpers: global context, reusable options and error handling."""
