"""
infrastructure - Concrete implementations of domain ports.

Contains all vendor-specific code: SQLite (aiosqlite) persistence and
environment configuration. Depends on domain/ only (implements ports).
Never imported by application/.
"""
