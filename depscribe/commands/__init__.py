"""CLI subcommands for depscribe."""
