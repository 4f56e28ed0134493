"""logfan CLI — Typer-based command-line interface.

Provides the ``logfan`` command with subcommands for validating a routes
file and emitting messages through it.

All output uses Rich for formatted terminal display.
"""
