"""Concrete renderers."""
