"""
Pytest configuration and fixtures for iorgate tests.
"""

import sys
from pathlib import Path

import httpx
import pytest

# Add the repository root to path for imports
# This allows `from iorgate.addressing import ...` to work
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from iorgate.app.dependencies import get_resolver  # noqa: E402
from iorgate.app.main import create_app  # noqa: E402
from iorgate.bridge import PersistenceBridge  # noqa: E402
from iorgate.components import create_default_type_registry  # noqa: E402
from iorgate.config import AppSettings  # noqa: E402
from iorgate.runtime import ComponentResolver, StaticResourceLoader  # noqa: E402
from iorgate.storage import MemoryComponentStore  # noqa: E402


@pytest.fixture
def web_root(tmp_path):
    """Web root with a couple of script resources."""
    root = tmp_path / "www"
    components = root / "Components"
    (components / "Document").mkdir(parents=True)
    (components / "Generic.mjs").write_text("export default class Generic {}\n")
    (components / "Document" / "index.mjs").write_text("export default class Document {}\n")
    (root / "index.html").write_text("<html></html>\n")
    return root


@pytest.fixture
def store():
    return MemoryComponentStore()


@pytest.fixture
def resolver(store, web_root):
    return ComponentResolver(
        store=store,
        types=create_default_type_registry(),
        static_loader=StaticResourceLoader(web_root),
    )


@pytest.fixture
def bridge(resolver):
    return PersistenceBridge(resolver)


@pytest.fixture
def app(resolver, web_root):
    """Application wired to the test resolver and web root."""
    application = create_app(AppSettings(web_root=str(web_root)))
    application.dependency_overrides[get_resolver] = lambda: resolver
    return application


@pytest.fixture
def client(app):
    """Async HTTP client driving the ASGI app in-process."""
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver",
    )


@pytest.fixture
def sample_payload():
    """Creation payload for a generic component."""
    return {
        "typeReference": "ior:esm:/Components/Generic",
        "model": {"foo": 1, "bar": 2},
        "id": "X",
        "aliases": ["a"],
    }
