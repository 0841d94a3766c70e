"""modelsync CLI — Typer-based command-line interface.

Provides the ``modelsync`` command with subcommands for inspecting
bindings, publishing and consuming messages on the local queue, running
the demo scenario, and showing effective settings.

All output uses Rich for formatted terminal display.
"""
