"""
Centralized configuration for graph-transform.

All configuration values should be imported from this module.
Supports environment variable overrides for containerization.
"""

import os
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


MISSING_ENDPOINT_POLICIES = ("skip", "abort")


def _find_project_root() -> Path:
    """Find project root by looking for pyproject.toml or .git."""
    current = Path(__file__).resolve().parent
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists() or (parent / ".git").exists():
            return parent
    return current.parent


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Config:
    """graph-transform configuration."""

    # ==========================================================================
    # Paths
    # ==========================================================================
    PROJECT_ROOT: Path = field(default_factory=_find_project_root)

    # ==========================================================================
    # Source graph (Neo4j)
    # ==========================================================================
    @property
    def NEO4J_URI(self) -> str:
        return os.environ.get("NEO4J_URI", "bolt://localhost:7687")

    @property
    def NEO4J_USER(self) -> str:
        return os.environ.get("NEO4J_USER", "neo4j")

    @property
    def NEO4J_PASSWORD(self) -> str:
        return os.environ.get("NEO4J_PASSWORD", "")

    @property
    def NEO4J_DATABASE(self) -> str:
        return os.environ.get("NEO4J_DATABASE", "neo4j")

    # ==========================================================================
    # Target graph (Neo4j), defaults to the source connection
    # ==========================================================================
    @property
    def TARGET_NEO4J_URI(self) -> str:
        return os.environ.get("TARGET_NEO4J_URI", self.NEO4J_URI)

    @property
    def TARGET_NEO4J_USER(self) -> str:
        return os.environ.get("TARGET_NEO4J_USER", self.NEO4J_USER)

    @property
    def TARGET_NEO4J_PASSWORD(self) -> str:
        return os.environ.get("TARGET_NEO4J_PASSWORD", self.NEO4J_PASSWORD)

    @property
    def TARGET_NEO4J_DATABASE(self) -> str:
        return os.environ.get("TARGET_NEO4J_DATABASE", self.NEO4J_DATABASE)

    # ==========================================================================
    # Document store (Elasticsearch)
    # ==========================================================================
    @property
    def ELASTICSEARCH_URL(self) -> str:
        return os.environ.get("ELASTICSEARCH_URL", "http://localhost:9200")

    @property
    def ELASTICSEARCH_USER(self) -> Optional[str]:
        return os.environ.get("ELASTICSEARCH_USER")

    @property
    def ELASTICSEARCH_PASSWORD(self) -> Optional[str]:
        return os.environ.get("ELASTICSEARCH_PASSWORD")

    # ==========================================================================
    # Processing
    # ==========================================================================
    @property
    def BULK_SIZE_BYTES(self) -> int:
        return int(os.environ.get("BULK_SIZE_BYTES", "5000000"))

    @property
    def RAW_THREAD_COUNT(self) -> int:
        return int(os.environ.get("RAW_THREAD_COUNT", "4"))

    @property
    def RAW_INDEX_PREFIX(self) -> str:
        return os.environ.get("RAW_INDEX_PREFIX", "")

    @property
    def OBJECT_INDEX_PREFIX(self) -> str:
        return os.environ.get("OBJECT_INDEX_PREFIX", "")

    @property
    def PRESERVE_ORIGINAL_ID(self) -> bool:
        return _env_bool("PRESERVE_ORIGINAL_ID", False)

    @property
    def MISSING_ENDPOINT_POLICY(self) -> str:
        return os.environ.get("MISSING_ENDPOINT_POLICY", "skip").strip().lower()

    @property
    def PROGRESS_INTERVAL(self) -> int:
        return int(os.environ.get("PROGRESS_INTERVAL", "10000"))

    @property
    def RULES(self) -> list[str]:
        raw = os.environ.get("RULES", "")
        return [path.strip() for path in raw.split(",") if path.strip()]

    @property
    def LOG_LEVEL(self) -> str:
        return os.environ.get("LOG_LEVEL", "INFO")

    # ==========================================================================
    # Validation
    # ==========================================================================
    def validate(self) -> list[str]:
        """Return list of configuration errors."""
        errors = []

        if self.BULK_SIZE_BYTES <= 0:
            errors.append(f"BULK_SIZE_BYTES must be positive: {self.BULK_SIZE_BYTES}")

        if self.RAW_THREAD_COUNT <= 0:
            errors.append(f"RAW_THREAD_COUNT must be positive: {self.RAW_THREAD_COUNT}")

        if self.PROGRESS_INTERVAL <= 0:
            errors.append(f"PROGRESS_INTERVAL must be positive: {self.PROGRESS_INTERVAL}")

        if self.MISSING_ENDPOINT_POLICY not in MISSING_ENDPOINT_POLICIES:
            errors.append(
                f"Unknown MISSING_ENDPOINT_POLICY: {self.MISSING_ENDPOINT_POLICY}. "
                f"Expected one of {', '.join(MISSING_ENDPOINT_POLICIES)}."
            )

        if not self.NEO4J_PASSWORD:
            errors.append("NEO4J_PASSWORD not set")

        return errors

    def __repr__(self) -> str:
        return (
            f"Config(\n"
            f"  PROJECT_ROOT={self.PROJECT_ROOT}\n"
            f"  NEO4J_URI={self.NEO4J_URI}\n"
            f"  TARGET_NEO4J_URI={self.TARGET_NEO4J_URI}\n"
            f"  ELASTICSEARCH_URL={self.ELASTICSEARCH_URL}\n"
            f"  BULK_SIZE_BYTES={self.BULK_SIZE_BYTES}\n"
            f"  RAW_THREAD_COUNT={self.RAW_THREAD_COUNT}\n"
            f")"
        )


# Global config instance
config = Config()


# Convenience exports
NEO4J_URI = config.NEO4J_URI
NEO4J_USER = config.NEO4J_USER
NEO4J_PASSWORD = config.NEO4J_PASSWORD
ELASTICSEARCH_URL = config.ELASTICSEARCH_URL
BULK_SIZE_BYTES = config.BULK_SIZE_BYTES
