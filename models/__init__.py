"""Value types produced by the advertisement decoder."""
