"""Command line commands for fluide."""
