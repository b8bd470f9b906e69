"""Service wiring for callers such as HTTP route handlers."""
