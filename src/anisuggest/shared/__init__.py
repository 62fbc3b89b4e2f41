"""Shared utilities for AniSuggest: errors, structured logging and constants."""
