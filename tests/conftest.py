"""Root pytest configuration for oci-remotes tests."""
import httpx
import pytest

from oci_remotes.settings import Settings


REGISTRY_HOST = "registry.test"
MANIFEST_URL = "https://example.com/v2/repo/manifests/latest"


@pytest.fixture(autouse=True)
def test_env(monkeypatch):
    """Automatically set up test environment variables."""
    monkeypatch.setenv("OCI_REMOTES_REGISTRY_URL", REGISTRY_HOST)
    for key in ("OCI_REMOTES_REGISTRY_INSECURE", "OCI_REMOTES_REGISTRY_USERNAME",
                "OCI_REMOTES_REGISTRY_PASSWORD", "OCI_REMOTES_HTTP_TIMEOUT",
                "OCI_REMOTES_ERROR_BODY_LIMIT"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def settings():
    """Standard test settings."""
    return Settings(registry_url=REGISTRY_HOST)


@pytest.fixture
def manifest_request():
    """GET request for a manifest, as attached to registry responses."""
    return httpx.Request("GET", MANIFEST_URL)
