"""Command-line client for the community stream API."""
