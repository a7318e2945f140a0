# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Application configuration via environment variables and .env files."""

from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


Port = Annotated[int, Field(ge=0, le=65535)]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SHADEWATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
    )

    # External scanner
    port_scan_command: str = "python -m shadelight {address} --ports {port}"
    port_scan_address: str = "127.0.0.1/32"
    ports: Annotated[list[Port], NoDecode] = [22, 80, 443, 3389]
    malware_scan_command: str = "python signature_scan.py {target}"
    result_artifact_path: Path = Path("signature_scan_result_structured.json")
    process_timeout: float | None = None  # seconds, None waits indefinitely

    @field_validator("ports", mode="before")
    @classmethod
    def _parse_ports(cls, v: object) -> list[int]:
        if isinstance(v, str):
            return [int(p.strip()) for p in v.split(",") if p.strip()]
        if isinstance(v, int):
            return [v]
        return v if isinstance(v, list) else []

    # Scheduling
    inter_unit_delay: float = 0.3
    display_hold: float = 0.6

    # Synthetic progress
    progress_tick: float = 0.25
    progress_step_min: int = 2
    progress_step_max: int = 6
    progress_cap: int = 90

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"


def get_settings() -> Settings:
    return Settings()


def with_ports(settings: Settings, ports: str | list[int]) -> Settings:
    """Copy of ``settings`` with a validated replacement port list.

    Raises:
        pydantic.ValidationError: If a port is not an integer in [0, 65535].
    """
    return Settings.model_validate({**settings.model_dump(), "ports": ports})
