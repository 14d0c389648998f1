"""
Shared DramaBox backend library code.

This package is intended to hold code that is reused across:
- the read-only FastAPI app in `api/`
- catalog sync scripts in `scripts/`

App entrypoints (FastAPI routers, CLI scripts) should live outside this package and
import from `dramabox_backend` rather than the other way around.
"""
