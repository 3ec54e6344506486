"""
Configuration for a garden content index.

One RelationsConfig describes one isolated collection (e.g. blog and
garden side by side). load_config() builds the default collection from
environment variables, reading a .env file at the repository root first.

Environment:
    GARDEN_CONTENT_DIR        content root (default: <repo>/content)
    GARDEN_EXCLUDE            comma-separated exclude globs
    GARDEN_MAX_WORKERS        parse/meta worker threads (default: 4)
    GARDEN_SORT_PROP_VALUES   sort get_paths_by_prop output (default: false)
    GARDEN_DROP_DRAFTS        skip pages with draft: true (default: false)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .discovery import DEFAULT_EXTENSIONS
from .generators import (
    DEFAULT_META_GENERATORS,
    MetaGenerator,
    RelationGenerator,
    default_relation_generators,
)

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_CONTENT_DIR = BASE_DIR / "content"


class RelationsConfig(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    content: Path = Field(..., description="Root directory of the content files.")
    meta_generators: Dict[str, MetaGenerator] = Field(default_factory=dict)
    relation_generators: Dict[str, RelationGenerator] = Field(default_factory=dict)
    exclude: List[str] = Field(default_factory=list)
    extensions: List[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    slug_rewrites: Dict[str, str] = Field(default_factory=dict)
    drop_drafts: bool = False
    sort_prop_values: bool = False
    include_content: bool = False
    param_name: str = "slug"
    max_workers: int = Field(4, ge=1, le=64)

    @field_validator("extensions")
    @classmethod
    def normalize_extensions(cls, value: List[str]) -> List[str]:
        cleaned = []
        for ext in value:
            ext = ext.strip().lower()
            if not ext:
                continue
            if not ext.startswith("."):
                ext = "." + ext
            cleaned.append(ext)
        if not cleaned:
            raise ValueError("At least one content extension is required.")
        return cleaned

    @field_validator("meta_generators", "relation_generators")
    @classmethod
    def check_callables(cls, value: Dict) -> Dict:
        for key, generator in value.items():
            if not callable(generator):
                raise ValueError(f"Generator '{key}' is not callable.")
        return value

    @field_validator("param_name")
    @classmethod
    def check_param_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("param_name cannot be empty.")
        return cleaned


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def load_config(env_file: Optional[Path] = None, **overrides) -> RelationsConfig:
    """Build a RelationsConfig from the environment.

    Args:
        env_file: .env file to load (default: <repo>/.env when present)
        **overrides: Field values taking precedence over the environment

    Returns:
        RelationsConfig with the stock generators installed
    """
    env_path = env_file or BASE_DIR / ".env"
    if env_path.exists():
        load_dotenv(env_path)
        logger.info(f"Loaded environment from {env_path}")

    exclude = [p.strip() for p in os.environ.get("GARDEN_EXCLUDE", "").split(",") if p.strip()]

    values = {
        "content": Path(os.environ.get("GARDEN_CONTENT_DIR", str(DEFAULT_CONTENT_DIR))),
        "meta_generators": dict(DEFAULT_META_GENERATORS),
        "relation_generators": default_relation_generators(),
        "exclude": exclude,
        "max_workers": int(os.environ.get("GARDEN_MAX_WORKERS", "4")),
        "sort_prop_values": _env_flag("GARDEN_SORT_PROP_VALUES"),
        "drop_drafts": _env_flag("GARDEN_DROP_DRAFTS"),
    }
    values.update(overrides)
    return RelationsConfig(**values)
