"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"


class Settings(BaseModel):
    app_name:       str = "blogpub"
    db_url:         str = "sqlite:///blogpub.db"
    posts_dir:      str = Field(default="_posts", description="Default directory holding post files")
    staging_dir:    str = Field(default=".blogpub/staging", description="Staging directory for extracted JSON")
    output_dir:     str = Field(default="dist", description="Directory for exported posts and site index")
    parser_config:  str = Field(default="gfm-like", description="MarkdownIt parser preset name")
    max_versions:   int = Field(default=10, ge=0, description="Max stored versions per post; 0 disables pruning")
    base_url:       str = Field(default="http://localhost:1313", description="Site root used for absolute URLs")
    summary_length: int = Field(default=20, ge=1, description="Words in a generated post summary")
    paginate:       int = Field(default=6, ge=1, description="Posts per index page")
    teaser_prefix:    str = ""
    teaser_suffix:    str = ""
    opengraph_prefix: str = ""
    opengraph_suffix: str = ""
    log_level:      str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR)$")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then BLOGPUB_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping")

    for name in Settings.model_fields:
        if val := os.getenv(f"BLOGPUB_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
