"""Decoding, batching and aggregation services."""
