"""Report cache: keys, TTL policy, invalidation."""
