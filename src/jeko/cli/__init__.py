"""Command line interface: typer application and interactive REPL."""
