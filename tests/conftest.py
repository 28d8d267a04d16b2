"""
Pytest configuration and shared fixtures for the Flutter installer tests.
"""

import io
from pathlib import Path

import pytest

from flutterinstaller.config.settings import InstallerConfig
from flutterinstaller.pipeline.agent import PipelineAgent
from flutterinstaller.sdk.manifest import ReleaseManifest
from tests.fixtures.sdk import BASE_URL, build_sdk_zip


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


# ============================================================================
# Manifest Fixtures
# ============================================================================


@pytest.fixture
def manifest_data() -> dict:
    """Release manifest document in the published releases_<arch>.json shape."""
    return {
        "base_url": BASE_URL,
        "current_release": {"stable": "H1", "beta": "H2", "dev": "H3"},
        "releases": [
            {
                "hash": "H3",
                "channel": "dev",
                "version": "v2.6.0-0.1.pre",
                "release_date": "2021-09-10T00:00:00.000Z",
                "archive": "dev/linux/flutter_linux_2.6.0-0.1.pre-dev.tar.xz",
                "sha256": "",
            },
            {
                "hash": "H2",
                "channel": "beta",
                "version": "v2.5.0-5.3.pre",
                "release_date": "2021-09-01T00:00:00.000Z",
                "archive": "beta/linux/flutter_linux_2.5.0-5.3.pre-beta.tar.xz",
                "sha256": "",
            },
            {
                "hash": "H1",
                "channel": "stable",
                "version": "v2.5.0",
                "release_date": "2021-09-08T00:00:00.000Z",
                "archive": "a.zip",
                "sha256": "",
            },
            {
                "hash": "H0",
                "channel": "stable",
                "version": "v2.2.3",
                "release_date": "2021-06-30T00:00:00.000Z",
                "archive": "stable/linux/flutter_linux_2.2.3-stable.tar.xz",
                "sha256": "",
            },
        ],
    }


@pytest.fixture
def release_manifest(manifest_data) -> ReleaseManifest:
    """Parsed manifest."""
    return ReleaseManifest.from_dict(manifest_data)


# ============================================================================
# Agent / Config Fixtures
# ============================================================================


@pytest.fixture
def agent_output() -> io.StringIO:
    """Captures logging commands written by a PipelineAgent."""
    return io.StringIO()


@pytest.fixture
def make_agent(agent_output):
    """Factory for agents reading inputs from an isolated environment."""

    def _make(**inputs) -> PipelineAgent:
        environ = {
            PipelineAgent.input_key(name): value for name, value in inputs.items()
        }
        return PipelineAgent(environ=environ, stream=agent_output)

    return _make


@pytest.fixture
def installer_config(tmp_path) -> InstallerConfig:
    """Config with an isolated tool cache and agent temp directory."""
    temp_dir = tmp_path / "agent_temp"
    temp_dir.mkdir()
    return InstallerConfig(
        manifest_base_url=BASE_URL,
        cache_dir=tmp_path / "tool_cache",
        temp_dir=temp_dir,
        timeout=5,
    )


# ============================================================================
# Archive Fixtures
# ============================================================================


@pytest.fixture
def sdk_zip_bytes() -> bytes:
    return build_sdk_zip()


@pytest.fixture
def sdk_zip(tmp_path, sdk_zip_bytes) -> Path:
    """SDK zip written to disk."""
    path = tmp_path / "flutter_linux_2.5.0-stable.zip"
    path.write_bytes(sdk_zip_bytes)
    return path
