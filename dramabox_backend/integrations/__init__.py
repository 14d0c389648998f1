"""
External system integrations (scraped sites, notification endpoints).

New external clients should live under this namespace so they remain
decoupled from app entrypoints (`api/`) and sync scripts (`scripts/`).
"""
