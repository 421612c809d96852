"""Command line interface for the sensor advertisement decoder."""
