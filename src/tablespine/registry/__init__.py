"""Endpoint registry and record access.

Architecture::

    endpoints.py    EndpointRegistry, TableBinding, RegistrationState
    handlers.py     CrudHandlers bound to one table
    records.py      RecordRepository (projection, encoding)
"""

from tablespine.registry.endpoints import EndpointRegistry, RegistrationState, TableBinding
from tablespine.registry.handlers import CrudHandlers

__all__ = ["CrudHandlers", "EndpointRegistry", "RegistrationState", "TableBinding"]
