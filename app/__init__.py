"""HTTP service exposing the advertisement decoder."""
