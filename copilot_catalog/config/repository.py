"""
Repository Configuration

Which upstream content repository the catalog indexes, and how to reach it.
"""

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Optional

DEFAULT_OWNER = "github"
DEFAULT_REPO = "awesome-copilot"
DEFAULT_BRANCH = "main"

# Snapshot shipped inside the package (generated out-of-band, optional)
BUNDLED_METADATA_PATH = Path(__file__).resolve().parent.parent / "metadata.json"

RAW_CONTENT_HOST = "https://raw.githubusercontent.com"


@dataclass(frozen=True)
class RepoConfig:
    """Upstream repository coordinates plus optional snapshot sources."""
    owner: str = DEFAULT_OWNER
    repo: str = DEFAULT_REPO
    branch: str = DEFAULT_BRANCH
    token: Optional[str] = None
    metadata_url: Optional[str] = None  # hosted metadata.json (e.g. GitHub Pages)
    local_path: Optional[str] = None    # read from a local checkout instead of GitHub
    bundled_path: Optional[str] = str(BUNDLED_METADATA_PATH)
    
    @property
    def raw_base_url(self) -> str:
        return f"{RAW_CONTENT_HOST}/{self.owner}/{self.repo}/{self.branch or DEFAULT_BRANCH}"
    
    def raw_url(self, file_path: str) -> str:
        """Download URL for a repository-relative path."""
        return f"{self.raw_base_url}/{file_path.lstrip('/')}"
    
    def merged(self, overrides: dict[str, Any]) -> "RepoConfig":
        """Return a copy with known keys from `overrides` applied.
        
        Accepts both snake_case and the camelCase keys used by older config
        files (`metadataUrl`, `localPath`).
        """
        aliases = {"metadataUrl": "metadata_url", "localPath": "local_path", "bundledPath": "bundled_path"}
        known = {f.name for f in fields(self)}
        changes = {}
        for key, value in overrides.items():
            key = aliases.get(key, key)
            if key in known:
                changes[key] = value
        return replace(self, **changes)
