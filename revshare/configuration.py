"""Mini README: Centralised configuration for the revenue ledger.

Structure:
    * RevshareSettings - Pydantic settings read from ``REVSHARE_*`` variables.
    * get_settings - cached accessor.

Usage:
    The CLI and the web interface read default participants, shares and file
    locations from here. Values can be overridden per process via environment
    variables or a ``.env`` file.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RevshareSettings(BaseSettings):
    """Runtime configuration for the ledger service and tooling."""

    model_config = SettingsConfigDict(
        env_prefix="REVSHARE_",
        env_file=".env",
        case_sensitive=False,
    )

    environment: str = Field(
        "development",
        description="Environment label controlling debug toggles and logging levels.",
    )
    data_directory: Path = Field(
        Path("data"),
        description="Directory holding deployment records and persisted ledger state.",
    )
    interface_host: str = Field("127.0.0.1", description="Interface the HTTP service binds to.")
    interface_port: int = Field(8000, ge=1, le=65535)
    network: str = Field("localhost", description="Label stored alongside deployments.")
    company_address: str = Field(
        "0xf450623749cefe778b894b397a71695c57fec8dc",
        description="Depositor identity used when no explicit company is given.",
    )
    platform_address: str = Field("0x4b5d674dc94c44f13a30f306a49a7c9283e93a4f")
    creator_address: str = Field("0x212eb7d9494503c5779d009a0b9b4dab9240a08c")
    platform_share: int = Field(30, ge=0, le=100)
    creator_share: int = Field(70, ge=0, le=100)
    deployment_file: str = Field("deployment-info.json")
    state_file: str = Field("ledger-state.json")

    @field_validator("data_directory", mode="before")
    @classmethod
    def _expand_path(cls, value: Optional[str | Path]) -> Path:
        """Expand user directories and make sure the directory exists."""

        path = Path(value).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def deployment_path(self) -> Path:
        return self.data_directory / self.deployment_file

    @property
    def state_path(self) -> Path:
        return self.data_directory / self.state_file


@lru_cache()
def get_settings() -> RevshareSettings:
    """Return cached settings so every module sees the same configuration."""

    return RevshareSettings()
