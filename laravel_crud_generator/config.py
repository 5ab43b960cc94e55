import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .constants import DefaultConfig
from .domain.models import normalize_sub_path
from .exceptions import ConfigurationError, InvalidNameError


logger = logging.getLogger(__name__)


class GeneratorConfig(BaseModel):
    """Validated settings of one generation run."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., description="Entity name to scaffold, e.g. 'product'.")
    project_root: str = Field(
        DefaultConfig.PROJECT_ROOT,
        min_length=1,
        description="Root of the Laravel project all paths are relative to.",
    )
    schema_path: Optional[str] = Field(
        None, description="YAML or JSON schema file, relative to the project root."
    )
    api_route: Optional[str] = Field(
        None, description="Route file to register the resource route in."
    )
    controller_route: Optional[str] = Field(
        None, description="Sub-namespace for the controller, e.g. 'Api/V1'."
    )
    force: bool = Field(
        DefaultConfig.FORCE_OVERWRITE,
        description="Overwrite existing controller, service, DTO and resource files.",
    )
    create_stubs: bool = Field(
        DefaultConfig.CREATE_STUBS,
        description="Create the model and migration when the project has none.",
    )

    @field_validator("controller_route")
    @classmethod
    def check_controller_route(cls, v):
        """Controller sub-paths must be made of PHP namespace segments."""
        if v is None:
            return v
        try:
            normalize_sub_path(v)
        except InvalidNameError as e:
            raise ValueError(e.message) from e
        return v.strip().strip("\\/") or None

    @field_validator("schema_path", "api_route", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def root(self) -> Path:
        return Path(self.project_root)

    @property
    def route_file(self) -> Path:
        """The API route file, resolved against the project root."""
        route = Path(self.api_route or DefaultConfig.API_ROUTE_FILE)
        return route if route.is_absolute() else self.root / route


def _read_config_file(config_file: Path) -> Dict[str, Any]:
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing YAML file: {e}", config_file=config_file) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            "Configuration file must contain a mapping", config_file=config_file
        )
    logger.debug(f"Loaded configuration from {config_file}")
    return data


def load_config(
    config_path: Optional[str], cli_args: argparse.Namespace
) -> GeneratorConfig:
    """
    Load configuration from an optional YAML file merged with CLI arguments.

    CLI values that were given explicitly (not None) override the file. When
    no file is named, ``crud-generator.yaml`` in the project root is used if
    present.

    Raises:
        ConfigurationError: on a missing or malformed file, or invalid values
    """
    cli_dict = {key: value for key, value in vars(cli_args).items() if value is not None}
    raw_config: Dict[str, Any] = {}

    if config_path:
        config_file = Path(config_path)
        if not config_file.is_file():
            raise ConfigurationError("Config file not found", config_file=config_path)
        raw_config.update(_read_config_file(config_file))
    else:
        root = Path(cli_dict.get("project_root", DefaultConfig.PROJECT_ROOT))
        default_file = root / DefaultConfig.CONFIG_FILE_NAME
        if default_file.is_file():
            raw_config.update(_read_config_file(default_file))

    overridden_keys = set()
    for key, value in cli_dict.items():
        if key in GeneratorConfig.model_fields:
            raw_config[key] = value
            overridden_keys.add(key)
    if overridden_keys:
        logger.debug(f"Overridden config keys from CLI arguments: {sorted(overridden_keys)}")

    try:
        config = GeneratorConfig.model_validate(raw_config)
    except ValidationError as e:
        problems = []
        for error in e.errors():
            loc_str = " -> ".join(str(item) for item in error.get("loc", ())) or "Top Level"
            problems.append(f"{loc_str}: {error.get('msg', 'Unknown error')}")
        raise ConfigurationError(
            "Configuration validation failed",
            config_file=config_path,
            context={"errors": "; ".join(problems)},
        ) from e

    logger.debug(f"Effective configuration: {config.model_dump()}")
    return config
