"""
Address Reference Parser.

Parses request paths into structured AddressReferences.

Grammar:
    /UDE                      persisted-component namespace root
    /UDE/<address>            persisted-component namespace, addressed
    /ior:<tag>:...:<path>     reference namespace

    <address> is either a bare identifier or an ``ior:`` reference
    parsed with the same tag grammar.

A reference is an ordered protocol chain plus a path. The last tag in
the chain decides how the reference is resolved:

    ior:esm:/Components/Generic.mjs   -> script resource under the web root
    ior:ude:/X                        -> persisted component "X"

Usage:
    ref = parse_url("/ior:esm:/Components/Generic.mjs")
    ref.protocol_chain      # ("esm",)
    ref.path                # "/Components/Generic.mjs"

    # Force persisted-component semantics without re-parsing
    ude_ref = ref.with_protocol(UDE_PROTOCOL)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from iorgate.errors import MalformedReference

SCHEME_MARKER = "ior:"
ESM_PROTOCOL = "esm"
UDE_PROTOCOL = "ude"

_TAG_RE = re.compile(r"([A-Za-z][A-Za-z0-9+.-]*):")
_SLASHES_RE = re.compile(r"/{2,}")


class Namespace(str, Enum):
    """URL namespace a reference was parsed from."""

    UDE = "UDE"
    IOR = "ior"


UDE_ROOT = f"/{Namespace.UDE.value}"
IOR_ROOT = f"/{Namespace.IOR.value}"


@dataclass(frozen=True)
class AddressReference:
    """
    Structured address: protocol chain plus path.

    Equality and hashing only consider (protocol_chain, path); the
    namespace records where the reference came from and nothing more.

    Attributes:
        protocol_chain: Ordered protocol tags, last one wins
        path: Location/identifier left after the tags are stripped
        namespace: URL namespace the reference was parsed from
    """

    protocol_chain: tuple[str, ...] = ()
    path: str = ""
    namespace: Namespace | None = field(default=None, compare=False)

    @property
    def protocol(self) -> str | None:
        """Final protocol tag, or None for a bare reference."""
        return self.protocol_chain[-1] if self.protocol_chain else None

    @property
    def identifier(self) -> str:
        """Path with surrounding slashes stripped, used as component identity."""
        return self.path.strip("/")

    @property
    def is_root(self) -> bool:
        return not self.path

    @property
    def key(self) -> str:
        """
        Normalized key.

        Persisted-component references normalize to their identifier so
        that ``X``, ``/X`` and ``ior:esm:ude:X`` share one key. Repeated slashes in paths collapse.
        """
        if self.protocol == UDE_PROTOCOL:
            return f"{UDE_PROTOCOL}|{self.identifier}"
        return f"{':'.join(self.protocol_chain)}|{_SLASHES_RE.sub('/', self.path)}"

    def with_protocol(self, tag: str) -> AddressReference:
        """
        Return a copy with ``tag`` appended to the protocol chain.

        A chain already ending in ``tag`` is returned unchanged.
        """
        if not _TAG_RE.fullmatch(f"{tag}:"):
            raise MalformedReference(f"Invalid protocol tag: {tag!r}")
        if self.protocol == tag:
            return self
        return AddressReference(
            protocol_chain=(*self.protocol_chain, tag),
            path=self.path,
            namespace=self.namespace,
        )

    def __str__(self) -> str:
        if not self.protocol_chain and self.namespace is not Namespace.IOR:
            return self.path
        tags = "".join(f"{tag}:" for tag in self.protocol_chain)
        return f"{SCHEME_MARKER}{tags}{self.path}"


def parse_reference(text: str, namespace: Namespace | None = None) -> AddressReference:
    """
    Parse a reference string (no leading slash).

    ``ior:``-prefixed strings have their protocol tags split off;
    anything else is a bare identifier with an empty chain.

    Args:
        text: Reference text, e.g. "ior:esm:/X" or "X"
        namespace: Namespace to record on the result

    Returns:
        AddressReference

    Raises:
        MalformedReference: If an ``ior:`` reference has no path
    """
    if not text.startswith(SCHEME_MARKER):
        if not text:
            raise MalformedReference("Empty address reference")
        return AddressReference(path=text, namespace=namespace)

    rest = text[len(SCHEME_MARKER):]
    chain: list[str] = []
    while True:
        match = _TAG_RE.match(rest)
        if match is None:
            break
        chain.append(match.group(1))
        rest = rest[match.end():]

    if not rest:
        raise MalformedReference(f"Reference has no path: {text!r}")

    return AddressReference(protocol_chain=tuple(chain), path=rest, namespace=namespace)


def parse_url(raw_url: str) -> AddressReference:
    """
    Parse a request path into an AddressReference.

    Args:
        raw_url: URL path, e.g. "/UDE/X" or "/ior:esm:/X"

    Returns:
        AddressReference (the bare ``/UDE`` root yields an empty path)

    Raises:
        MalformedReference: If the path violates the grammar
    """
    if not raw_url.startswith("/"):
        raise MalformedReference(f"Address must start with '/': {raw_url!r}")

    if raw_url == UDE_ROOT or raw_url == f"{UDE_ROOT}/":
        return AddressReference(namespace=Namespace.UDE)

    if raw_url.startswith(f"{UDE_ROOT}/"):
        return parse_reference(raw_url[len(UDE_ROOT) + 1:], Namespace.UDE)

    if raw_url.startswith(IOR_ROOT):
        text = raw_url[1:]
        if not text.startswith(SCHEME_MARKER):
            raise MalformedReference(f"Reference must start with {SCHEME_MARKER!r}: {raw_url!r}")
        return parse_reference(text, Namespace.IOR)

    raise MalformedReference(f"Unrecognised namespace: {raw_url!r}")
