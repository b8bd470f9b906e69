"""Cache-first report service."""
