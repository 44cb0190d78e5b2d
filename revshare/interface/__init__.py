"""Mini README: HTTP interface for the revenue ledger.

Exports the FastAPI application factory. The handlers only translate HTTP
requests into ledger calls and ledger errors into status codes.
"""

from .web_app import create_application

__all__ = ["create_application"]
