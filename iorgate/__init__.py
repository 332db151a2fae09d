"""
iorgate - HTTP gateway for address references and persisted components.

iorgate resolves opaque address references into live components and
exposes their persisted state over HTTP:

- **Address references**: ``ior:<tag>:...:<path>`` with an ordered protocol chain
- **Components**: typed entities with validated models, ids and aliases
- **Persistence**: memory, JSON-file and MongoDB stores
- **HTTP**: ``/UDE`` for component CRUD, ``/ior`` for script redirects

Quick Start:
    >>> from iorgate.addressing import parse_url
    >>> from iorgate.bridge import PersistenceBridge
    >>> from iorgate.components import create_default_type_registry
    >>> from iorgate.runtime import ComponentResolver
    >>> from iorgate.storage import MemoryComponentStore
    >>>
    >>> resolver = ComponentResolver(
    ...     store=MemoryComponentStore(),
    ...     types=create_default_type_registry(),
    ... )
    >>> bridge = PersistenceBridge(resolver)
    >>> await bridge.create({"typeReference": "Generic", "model": {}, "id": "X"})
    >>> await bridge.read(parse_url("/UDE/X"))
"""

__version__ = "0.1.0"
__license__ = "MIT"

from iorgate.addressing import AddressReference, parse_url
from iorgate.errors import (
    Conflict,
    GatewayError,
    MalformedPayload,
    MalformedReference,
    NotFound,
    UnsupportedOperation,
)

__all__ = [
    "__version__",
    "__license__",
    "AddressReference",
    "Conflict",
    "GatewayError",
    "MalformedPayload",
    "MalformedReference",
    "NotFound",
    "UnsupportedOperation",
    "parse_url",
]
