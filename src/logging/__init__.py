"""Structured logging for reportcache."""
