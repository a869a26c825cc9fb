"""CLI subcommands for nuscout."""
