"""
L3 Detection — read-only probes.

These functions READ system state but never WRITE.
Subprocess calls, PATH lookups, env var reads — all read-only.
"""
