"""
Configuration of a purge invocation.

The configuration is assembled exactly once at startup from (in the order of increasing precedence):
 1. the `[purge]` table of an optional TOML file (`purge.toml` looked up in the config search path or given explicitly)
 2. the process environment using the GitHub Action conventions (`INPUT_<NAME>`, `GITHUB_REPOSITORY`, ...)

In the development environment (`PURGE_ENV=dev`) the action inputs are replaced by plain variables (`AGE`,
`PERSONAL_ACCESS_TOKEN`, `SKIP_TAGS`) and the purge runs in the simulate-only mode, so no token is required.

The resulting :class:`PurgeConfig` is immutable and passed explicitly to every component.
"""

import logging
import os
import tomllib
from pathlib import Path
from typing import Optional, Dict, Any, Mapping

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from actiontools.purge import paths, util
from actiontools.purge.err import ConfigError
from actiontools.purge.model import Repository
from actiontools.purge.util import files

log = logging.getLogger(__name__)

DEFAULT_API_URL = 'https://api.github.com'
DEFAULT_MAX_CONCURRENT_DELETIONS = 10
DEV_ENVIRONMENTS = ('dev', 'development')
ENV_MODE_VAR = 'PURGE_ENV'
CONFIG_TABLE = 'purge'


class PurgeConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    repository: str = Field(description="Repository in the `owner/name` format")
    age: str = Field(description="Maximum artifact age, e.g. `30 days`")
    token: Optional[str] = Field(default=None, repr=False, description="API token; not needed in simulate mode")
    skip_tags: bool = Field(default=False, description="Keep artifacts of runs for tagged commits")
    simulate: bool = Field(default=False, description="Only log what would be removed")
    api_url: str = Field(default=DEFAULT_API_URL)
    max_concurrent_deletions: int = Field(
        default=DEFAULT_MAX_CONCURRENT_DELETIONS,
        ge=0,
        description="Maximum number of deletion requests in flight; 0 means unbounded"
    )
    per_page: int = Field(default=100, ge=1, le=100)

    @field_validator('repository')
    @classmethod
    def _validate_repository(cls, value: str) -> str:
        return str(Repository.parse(value))

    @field_validator('age')
    @classmethod
    def _validate_age(cls, value: str) -> str:
        util.parse_age(value)
        return value.strip()

    @field_validator('skip_tags', 'simulate', mode='before')
    @classmethod
    def _parse_bool(cls, value):
        return util.parse_bool(value)

    @field_validator('api_url')
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip('/')

    @model_validator(mode='after')
    def _token_required_for_deletion(self) -> 'PurgeConfig':
        if not self.simulate and not self.token:
            raise ValueError("API token is required unless running in simulate mode")
        return self

    @property
    def repo(self) -> Repository:
        return Repository.parse(self.repository)

    @property
    def age_delta(self) -> relativedelta:
        return util.parse_age(self.age)


def is_dev_environment(environ: Mapping[str, str]) -> bool:
    return environ.get(ENV_MODE_VAR, '').strip().lower() in DEV_ENVIRONMENTS


def _input(environ: Mapping[str, str], name: str) -> Optional[str]:
    """
    Action inputs are exposed as `INPUT_<NAME>` with the name upper-cased; hyphens are kept by the runner
    but cannot be set from most shells, so the underscore variant is accepted as well.
    """
    key = 'INPUT_' + name.upper()
    value = environ.get(key)
    if value is None and '-' in key:
        value = environ.get(key.replace('-', '_'))
    return value or None


def config_from_env(environ: Mapping[str, str]) -> Dict[str, Any]:
    """
    Extract configuration values from environment variables. Only variables which are set are included.
    """
    dev = is_dev_environment(environ)
    values = {
        'repository': environ.get('GITHUB_REPOSITORY'),
        'api_url': environ.get('GITHUB_API_URL'),
        'max_concurrent_deletions': _input(environ, 'max-concurrency'),
    }
    if dev:
        values['age'] = environ.get('AGE')
        values['token'] = environ.get('PERSONAL_ACCESS_TOKEN')
        values['skip_tags'] = environ.get('SKIP_TAGS')
        values['simulate'] = True
    else:
        values['age'] = _input(environ, 'age')
        values['token'] = _input(environ, 'github_token')
        values['skip_tags'] = _input(environ, 'skip-tags')
        values['simulate'] = _input(environ, 'dry-run')

    return {k: v for k, v in values.items() if v is not None and v != ''}


def config_from_file(config_file) -> Dict[str, Any]:
    """
    Read the `[purge]` table of a TOML configuration file.

    Raises:
        ConfigError: If the file does not exist or is not a valid TOML document
    """
    try:
        content = files.read_toml_file(config_file)
    except FileNotFoundError:
        raise ConfigError(f"Config file `{config_file}` not found")
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid config file `{config_file}`: {e}") from e

    return dict(content.get(CONFIG_TABLE, {}))


def load_config(environ: Optional[Mapping[str, str]] = None,
                config_file: Optional[Path] = None,
                *,
                lookup: bool = True,
                **overrides) -> PurgeConfig:
    """
    Assemble and validate the purge configuration.

    Args:
        environ: Environment variables; the process environment is used when not provided
        config_file: Explicit TOML config file
        lookup: Search the config search path for `purge.toml` when no file is given
        overrides: Values taking precedence over both the file and the environment (e.g. CLI options)

    Returns:
        Validated immutable configuration

    Raises:
        ConfigError: If a value is missing or invalid
    """
    environ = os.environ if environ is None else environ

    if config_file is None and lookup:
        config_file = paths.lookup_config_file()

    values: Dict[str, Any] = {}
    if config_file:
        log.debug(f"[config_file_loaded] path=[{config_file}]")
        values.update(config_from_file(config_file))
    values.update(config_from_env(environ))
    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return PurgeConfig(**values)
    except ValidationError as e:
        raise ConfigError(_format_validation_error(e)) from e


def _format_validation_error(error: ValidationError) -> str:
    problems = []
    for err in error.errors():
        field = '.'.join(str(loc) for loc in err['loc']) or 'config'
        problems.append(f"{field}: {err['msg']}")
    return "Invalid configuration - " + "; ".join(problems)
