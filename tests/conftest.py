"""
Shared pytest fixtures for Copilot Catalog tests

Centralized fakes for the source reader, a fixture snapshot, and the
standard logger/context mocks used across tool and dispatcher tests.
"""

import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import pytest
from unittest.mock import Mock

# Add project root to Python path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


# ============================================================================
# Fake Source Reader
# ============================================================================

class FakeSourceReader:
    """
    In-memory SourceReader.
    
    Records every path requested in `calls`. Paths listed in `failing` raise
    NetworkError; paths absent from `files` raise SourceNotFoundError.
    
    Usage:
        reader = FakeSourceReader({"metadata.json": json.dumps(snapshot)})
        content = await reader.read_file("metadata.json")
        assert reader.calls == ["metadata.json"]
    """
    
    def __init__(self, files: Optional[Dict[str, str]] = None, failing: Optional[set] = None):
        self.files = dict(files or {})
        self.failing = set(failing or ())
        self.calls: list[str] = []
    
    async def read_file(self, relative_path: str) -> str:
        from copilot_catalog.catalog import NetworkError, SourceNotFoundError
        
        self.calls.append(relative_path)
        if relative_path in self.failing:
            raise NetworkError(f"Failed to fetch {relative_path}: connection reset")
        if relative_path not in self.files:
            raise SourceNotFoundError(relative_path)
        return self.files[relative_path]
    
    def describe(self) -> str:
        return "fake"


class FakeJsonFetcher:
    """Hosted snapshot fetcher returning a fixed document (or raising)."""
    
    def __init__(self, document: Any = None, error: Optional[Exception] = None):
        self.document = document
        self.error = error
        self.urls: list[str] = []
    
    async def fetch_json(self, url: str) -> Any:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.document


# ============================================================================
# Snapshot Fixtures
# ============================================================================

def make_snapshot() -> Dict[str, Any]:
    """A small snapshot with one name ("item") shared by an agent and a prompt."""
    base = "https://raw.githubusercontent.com/github/awesome-copilot/main"
    return {
        "version": "1.0.0",
        "generatedAt": "2025-01-01T00:00:00Z",
        "agents": [
            {
                "name": "python-expert",
                "description": "Expert Python developer",
                "tags": ["Python", "backend"],
                "path": "agents/python-expert.agent.md",
                "url": f"{base}/agents/python-expert.agent.md",
            },
            {
                "name": "item",
                "description": "Agent sharing its name with a prompt",
                "tags": ["shared"],
                "path": "agents/item.agent.md",
                "url": f"{base}/agents/item.agent.md",
            },
            {
                "name": "react-reviewer",
                "description": "Reviews React components",
                "tags": ["frontend", "react"],
                "path": "agents/react-reviewer.agent.md",
                "url": f"{base}/agents/react-reviewer.agent.md",
            },
        ],
        "prompts": [
            {
                "name": "item",
                "description": "Prompt sharing its name with an agent",
                "tags": ["shared"],
                "path": "prompts/item.prompt.md",
                "url": f"{base}/prompts/item.prompt.md",
            },
            {
                "name": "write-tests",
                "description": "Generate unit tests",
                "tags": ["testing"],
                "path": "prompts/write-tests.prompt.md",
                "url": f"{base}/prompts/write-tests.prompt.md",
            },
        ],
        "instructions": [
            {
                "name": "python-style",
                "description": "Python coding conventions",
                "path": "instructions/python-style.instructions.md",
                "url": f"{base}/instructions/python-style.instructions.md",
            },
        ],
        "skills": [
            {
                "name": "webapp-testing",
                "description": "Test web applications with Playwright",
                "tags": ["testing", "frontend"],
                "path": "skills/webapp-testing/SKILL.md",
                "url": f"{base}/skills/webapp-testing/SKILL.md",
                "files": ["SKILL.md", "scripts/run.py"],
            },
            {
                "name": "bare-skill",
                "description": "Skill without a file list",
                "tags": [],
                "path": "skills/bare-skill/SKILL.md",
                "url": f"{base}/skills/bare-skill/SKILL.md",
            },
        ],
        "collections": [
            {
                "id": "testing-kit",
                "name": "testing-kit",
                "description": "Everything for testing",
                "tags": ["testing"],
                "path": "collections/testing-kit.collection.yml",
                "url": f"{base}/collections/testing-kit.collection.yml",
                "items": [
                    {"path": "prompts/write-tests.prompt.md", "kind": "prompt"},
                    {"path": "skills/webapp-testing/SKILL.md", "kind": "skill"},
                ],
                "display": {"ordering": "manual", "show_badge": True},
            },
        ],
    }


@pytest.fixture
def snapshot():
    return make_snapshot()


@pytest.fixture
def index(snapshot):
    from copilot_catalog.catalog import Index
    return Index.from_snapshot(snapshot, source="test")


@pytest.fixture
def repo_config():
    """Default repository coordinates with the bundled snapshot disabled."""
    from copilot_catalog.config import RepoConfig
    return RepoConfig(bundled_path=None)


@pytest.fixture
def reader(snapshot):
    """Reader serving the fixture snapshot plus the webapp-testing skill files."""
    return FakeSourceReader({
        "metadata.json": json.dumps(snapshot),
        "skills/webapp-testing/SKILL.md": "# Webapp testing",
        "skills/webapp-testing/scripts/run.py": "print('run')",
        "skills/bare-skill/SKILL.md": "# Bare",
    })


@pytest.fixture
def index_cache(reader, repo_config):
    from copilot_catalog.catalog import IndexCache
    return IndexCache(reader, repo_config)


# ============================================================================
# Base Fixtures
# ============================================================================

@pytest.fixture
def mock_config(repo_config):
    """
    Standard configuration for server tests: no auth, no origin checks,
    no rate limit.
    """
    from copilot_catalog.config import Config
    
    return Config(environment="test", log_level="ERROR", repo=repo_config)


@pytest.fixture
def logger():
    """
    Standard mock logger for all tests.
    """
    from copilot_catalog.utils.logger import Logger
    return Mock(spec=Logger)


@pytest.fixture
def mock_context():
    """
    Standard ToolContext for all tests.
    """
    from copilot_catalog.mcp_types.tools import ToolContext
    
    return ToolContext(
        requestId='test_req_123',
        timestamp=1234567890.0,
        toolName=None
    )


@pytest.fixture
def result_data():
    """Decode the JSON text of a successful ToolHandlerResult."""
    def _decode(handler_result):
        assert handler_result.result is not None
        return json.loads(handler_result.result.content[0].text)
    return _decode
