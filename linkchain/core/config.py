"""linkchain.core.config

Two config surfaces only:
1) `config/default.yaml`, optionally overridden by `config/user.yaml`
2) Environment variables (`LINKCHAIN_` prefix, `__` between nested keys), which win over YAML

The genesis section is the one setting that must agree across every node.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, PydanticBaseSettingsSource

from linkchain import GENESIS_DATA, GENESIS_HASH, GENESIS_TIMESTAMP
from linkchain.core.exceptions import ConfigError
from linkchain.core.models import Block, genesis_block


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


class GenesisConfig(BaseModel):
    data: str = GENESIS_DATA
    hash: str = GENESIS_HASH
    timestamp: float = GENESIS_TIMESTAMP

    @field_validator("hash")
    @classmethod
    def hash_must_be_hex_digest(cls, v: str) -> str:
        v = v.strip().lower()
        if len(v) != 64 or any(c not in "0123456789abcdef" for c in v):
            raise ValueError("genesis hash must be a 64-char hex SHA-256 digest")
        return v

    def block(self) -> Block:
        return genesis_block(data=self.data, hash=self.hash, timestamp=self.timestamp)


class P2PConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = Field(default=6001, ge=1, le=65535)
    connect_timeout_s: float = 10.0


class ApiConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = Field(default=3001, ge=1, le=65535)
    auth_token: str = ""


class LoggingConfig(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    json_output: bool = False


class Config(BaseSettings):
    """Root configuration. Single source of truth."""

    peers: Annotated[list[str], NoDecode] = Field(default_factory=list)

    genesis: GenesisConfig = Field(default_factory=GenesisConfig)
    p2p: P2PConfig = Field(default_factory=P2PConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"env_prefix": "LINKCHAIN_", "env_nested_delimiter": "__"}

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # YAML arrives as init kwargs; LINKCHAIN_* variables override it key by key.
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @field_validator("peers", mode="before")
    @classmethod
    def split_peer_list(cls, v: Any) -> Any:
        # PEERS-style "ws://a:6001,ws://b:6002" is accepted alongside YAML lists.
        if isinstance(v, str):
            return [p.strip() for p in v.split(",") if p.strip()]
        return v

    @classmethod
    def from_yaml(cls, path: Path, *, overlay: Path | None = None) -> Config:
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

        try:
            raw = yaml.safe_load(path.read_text()) or {}
            if overlay is not None and overlay.exists():
                raw = _deep_merge(raw, yaml.safe_load(overlay.read_text()) or {})
        except yaml.YAMLError as e:
            raise ConfigError(f"Config file is not valid YAML: {e}") from e

        if not isinstance(raw, dict):
            raise ConfigError(f"Config root must be a mapping: {path}")
        return cls(**raw)

    @classmethod
    def from_repo_defaults(cls, repo_root: Path | None = None) -> Config:
        root = repo_root or Path.cwd()
        config_dir = root / "config"
        default_path = config_dir / "default.yaml"
        if not default_path.exists():
            return cls()
        return cls.from_yaml(default_path, overlay=config_dir / "user.yaml")
