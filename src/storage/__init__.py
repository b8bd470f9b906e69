"""Blob stores and the prefix-namespacing storage service."""
