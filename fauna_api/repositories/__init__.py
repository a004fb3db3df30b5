"""
Persistence adapters.

These modules encapsulate how records are stored/retrieved (today flat JSON
files, tomorrow maybe an embedded KV store). Services depend on the
interfaces in ``base`` rather than touching the JSON files.
"""
