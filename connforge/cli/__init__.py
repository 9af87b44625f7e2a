"""Command line interface for connforge."""
