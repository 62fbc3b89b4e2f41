"""
AniSuggest command-line interface.

The Typer application lives in :mod:`anisuggest.cli.typer_app`.
"""
