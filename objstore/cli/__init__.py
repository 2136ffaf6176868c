"""Command line interface for objstore."""
