"""
City search package.

Cache-aside city search: sanitize -> cache -> geocoding provider on miss ->
deterministic ordering -> cache the full ordered set.
"""
