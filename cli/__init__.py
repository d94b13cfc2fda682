"""Command-line client for the weather gateway service.

The Typer application lives in ``cli.app`` and is exposed as the
``weather-gateway`` console script.
"""
