import os
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv

DEFAULT_PREFIX = "KMS_ENCRYPTED_"
LOG_FORMATS = ("text", "json")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Config:
    """Settings read from the environment (and a .env file, if present)."""
    prefix: str = DEFAULT_PREFIX
    region: Optional[str] = None
    endpoint_url: Optional[str] = None
    profile: Optional[str] = None
    log_level: str = "WARNING"
    log_format: str = "text"

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Config":
        if dotenv:
            # Never overrides variables already set, KMS_ENCRYPTED_* included.
            load_dotenv(find_dotenv(usecwd=True))
        log_format = os.getenv('SHUSH_LOG_FORMAT', 'text').lower()
        if log_format not in LOG_FORMATS:
            log_format = 'text'
        log_level = os.getenv('SHUSH_LOG_LEVEL', 'WARNING').upper()
        if log_level not in LOG_LEVELS:
            log_level = 'WARNING'
        return cls(
            prefix=os.getenv('SHUSH_PREFIX') or DEFAULT_PREFIX,
            region=os.getenv('SHUSH_REGION') or None,
            endpoint_url=os.getenv('SHUSH_KMS_ENDPOINT') or None,
            profile=os.getenv('AWS_PROFILE') or None,
            log_level=log_level,
            log_format=log_format,
        )
