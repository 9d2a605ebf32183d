from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from dotenv import load_dotenv
from omegaconf import MISSING, DictConfig, OmegaConf
from omegaconf.errors import ConfigKeyError, MissingMandatoryValue, ValidationError

from .exceptions import ConstructionError

DEFAULT_SUBMIT_URL = "http://api.blitline.com/job"

CONFIG_ENV_VAR = "BLITLINE_CONFIG"

# Environment variable -> config key
ENV_KEYS = {
    "BLITLINE_APPLICATION_ID": "application_id",
    "BLITLINE_S3_SOURCE_BUCKET": "s3_source_bucket",
    "BLITLINE_ALWAYS_EXTENDED_METADATA": "always_extended_metadata",
    "BLITLINE_SUBMIT_URL": "submit_url",
    "BLITLINE_TIMEOUT": "timeout",
}


@dataclass
class BlitlineConfig:
    """
    Settings for a BlitlineImageService.

    Attributes:
        application_id: Blitline application ID (API key) embedded in every job
        s3_source_bucket: Bucket used by ``load_s3_key``
        always_extended_metadata: Request extended metadata on every job
        submit_url: Job submission endpoint; override to point at a mock server
        timeout: Transport timeout in seconds, None to wait indefinitely
    """

    application_id: str = MISSING
    s3_source_bucket: Optional[str] = None
    always_extended_metadata: bool = False
    submit_url: str = DEFAULT_SUBMIT_URL
    timeout: Optional[float] = 30.0


def _env_overrides() -> Dict[str, Any]:
    load_dotenv()
    return {key: os.environ[var] for var, key in ENV_KEYS.items() if os.environ.get(var)}


def make_config(*sources: Union[DictConfig, Dict[str, Any]]) -> BlitlineConfig:
    """Merge the given sources over the defaults and return a typed config."""
    base = OmegaConf.structured(BlitlineConfig)
    try:
        merged = OmegaConf.merge(base, *sources)
        config: BlitlineConfig = OmegaConf.to_object(merged)  # type: ignore[assignment]
    except MissingMandatoryValue as exc:
        raise ConstructionError("Blitline application ID is not configured") from exc
    except ValidationError as exc:
        raise ConstructionError(f"Invalid Blitline configuration: {exc}") from exc
    except ConfigKeyError as exc:
        raise ConstructionError(f"Unknown Blitline configuration key: {exc}") from exc

    if not config.application_id.strip():
        raise ConstructionError("Blitline application ID must not be empty")
    return config


def load_config(path: Optional[Union[str, Path]] = None, overrides: Optional[Dict[str, Any]] = None) -> BlitlineConfig:
    """
    Load configuration from defaults, a YAML file, the environment and explicit overrides.

    Later sources win. The YAML file is taken from ``path`` or, when that is
    not given, from the ``BLITLINE_CONFIG`` environment variable; it is
    optional. Environment variables (``BLITLINE_APPLICATION_ID`` and friends)
    may also come from a ``.env`` file.

    Raises:
        ConstructionError: if no application ID ends up configured, or a value has the wrong type
        FileNotFoundError: if an explicitly named config file does not exist
    """
    sources: list = []

    env = _env_overrides()
    config_path = path or os.environ.get(CONFIG_ENV_VAR)
    if config_path:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Blitline config not found at {config_path}")
        loaded = OmegaConf.load(config_path)
        # Files may nest the settings under a top-level "blitline" key
        if isinstance(loaded, DictConfig) and "blitline" in loaded:
            loaded = loaded.blitline
        sources.append(loaded)

    sources.append(env)
    if overrides:
        sources.append({key: value for key, value in overrides.items() if value is not None})

    return make_config(*sources)
