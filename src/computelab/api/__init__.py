"""HTTP adapter for the job service.

Routing, body parsing and CORS live here; everything stateful lives in
``computelab.jobs``.
"""

from .app import create_app

__all__ = ["create_app"]
