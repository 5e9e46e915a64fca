"""Rich console output for the CLI."""
