"""
Address references.

Parsing of ``/UDE`` and ``/ior`` request paths into structured
references with an ordered protocol chain.
"""

from .reference import (
    ESM_PROTOCOL,
    IOR_ROOT,
    SCHEME_MARKER,
    UDE_PROTOCOL,
    UDE_ROOT,
    AddressReference,
    Namespace,
    parse_reference,
    parse_url,
)

__all__ = [
    "AddressReference",
    "ESM_PROTOCOL",
    "IOR_ROOT",
    "Namespace",
    "SCHEME_MARKER",
    "UDE_PROTOCOL",
    "UDE_ROOT",
    "parse_reference",
    "parse_url",
]
