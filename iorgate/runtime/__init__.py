"""
iorgate runtime layer.

The Resolver/Loader consumed by the persistence bridge and the HTTP
binding layer:
    - ComponentResolver: live registry, resolution, instantiation
    - StaticResourceLoader: ior:esm references -> files under the web root
    - SingleFlight: per-key deduplication of concurrent resolution
"""

from .resolver import ComponentResolver
from .singleflight import SingleFlight
from .static import ResourcePath, StaticResourceLoader

__all__ = [
    "ComponentResolver",
    "ResourcePath",
    "SingleFlight",
    "StaticResourceLoader",
]
