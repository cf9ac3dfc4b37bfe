"""Configuration management for premisgen.

Sections:
- agents: the system agent and the depositor written into every record
- rights: the rights statement (basis, granted act, restriction)
- build: identifier types, derived format label, hashing, fallbacks
- output: default file name, pretty printing, schema location

Config resolution order (highest priority first):
1. Programmatic (PremisgenConfig constructed in code, or a --profile YAML)
2. Environment variables (PREMISGEN_*, also read from a .env file)
3. Config file (~/.config/premisgen/config.json, managed by `premisgen config`)
4. Hardcoded defaults
"""

import copy
import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import find_dotenv, load_dotenv

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


# =============================================================================
# Config file location
# =============================================================================

CONFIG_DIR = Path.home() / ".config" / "premisgen"
CONFIG_FILE = CONFIG_DIR / "config.json"

PREMIS_SCHEMA_LOCATION = (
    "http://www.loc.gov/premis/v3 http://www.loc.gov/standards/premis/premis-3-0.xsd"
)


# =============================================================================
# Config sections
# =============================================================================


@dataclass
class AgentProfile:
    """Identity of one agent section."""

    identifier_type: str = "local"
    identifier_value: str = ""
    name: str = ""
    type: str = ""


def _system_agent() -> AgentProfile:
    return AgentProfile(
        identifier_type="local",
        identifier_value="premisgen",
        name="premisgen",
        type="software",
    )


def _depositor_agent() -> AgentProfile:
    return AgentProfile(
        identifier_type="email",
        identifier_value="uploader@example.org",
        name="Case Uploader",
        type="human",
    )


@dataclass
class AgentsConfig:
    """The two agents every record carries."""

    system: AgentProfile = field(default_factory=_system_agent)
    depositor: AgentProfile = field(default_factory=_depositor_agent)


@dataclass
class RightsConfig:
    basis: str = "statute"
    act: str = "access"
    restriction: str = "Access restricted to authorized user"


@dataclass
class BuildConfig:
    """Record-building settings.

    - identifier_type: objectIdentifierType for the entity and file objects
    - related_identifier_type: relatedObjectIdentifierType for links
    - creating_application: name written for metadata and derived files
    - derived_format: format label of rep2 (converted) files
    - significant_property: entity significantPropertiesValue ("" to omit)
    - fallback_originals: PDFs taken as originals when rep1 is empty
    - hash_chunk_size: bytes read per digest update
    - ingest_event: add an ingest event naming the system agent
    """

    identifier_type: str = "local"
    related_identifier_type: str = "FilePath"
    creating_application: str = "premisgen"
    derived_format: str = "PDF/A-1B"
    significant_property: str = "Case SIP"
    fallback_originals: int = 2
    hash_chunk_size: int = 65536
    ingest_event: bool = True


@dataclass
class OutputConfig:
    filename: str = "premis.xml"
    pretty_print: bool = True
    schema_location: str = PREMIS_SCHEMA_LOCATION


# =============================================================================
# Main config class
# =============================================================================


@dataclass
class PremisgenConfig:
    """Top-level premisgen configuration.

    Examples:
        # Package use
        config = PremisgenConfig(rights=RightsConfig(basis="license"))

        # CLI use, loads ~/.config/premisgen/config.json and PREMISGEN_* vars
        config = PremisgenConfig.load()
    """

    agents: AgentsConfig = field(default_factory=AgentsConfig)
    rights: RightsConfig = field(default_factory=RightsConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    @classmethod
    def load(cls) -> "PremisgenConfig":
        """Load config from file + env vars.

        Priority: env var values > config.json values > defaults.
        """
        config = cls()

        # Layer 1: config file
        if CONFIG_FILE.exists():
            try:
                with open(CONFIG_FILE) as f:
                    data = json.load(f)
                _apply_dict(config, data)
            except (json.JSONDecodeError, OSError, ConfigurationError) as exc:
                logger.warning("Failed to load config from %s: %s", CONFIG_FILE, exc)

        # Layer 2: env var overrides
        _ensure_dotenv()
        _apply_env_vars(config)
        return config

    def save(self) -> None:
        """Save config to ~/.config/premisgen/config.json."""
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        with open(CONFIG_FILE, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for display."""
        return {
            "agents": asdict(self.agents),
            "rights": asdict(self.rights),
            "build": asdict(self.build),
            "output": asdict(self.output),
        }

    def with_profile(self, data: dict[str, Any]) -> "PremisgenConfig":
        """Copy of this config with a profile mapping applied on top."""
        config = copy.deepcopy(self)
        _apply_dict(config, data, strict=True)
        return config


# =============================================================================
# Dict / env application
# =============================================================================

PROFILE_SECTIONS = ("agents", "rights", "build", "output")

ENV_VARS: dict[str, tuple[str, ...]] = {
    "PREMISGEN_IDENTIFIER_TYPE": ("build", "identifier_type"),
    "PREMISGEN_DERIVED_FORMAT": ("build", "derived_format"),
    "PREMISGEN_CREATING_APPLICATION": ("build", "creating_application"),
    "PREMISGEN_HASH_CHUNK_SIZE": ("build", "hash_chunk_size"),
    "PREMISGEN_SYSTEM_AGENT": ("agents", "system", "name"),
    "PREMISGEN_DEPOSITOR_NAME": ("agents", "depositor", "name"),
    "PREMISGEN_DEPOSITOR_ID": ("agents", "depositor", "identifier_value"),
    "PREMISGEN_RIGHTS_BASIS": ("rights", "basis"),
    "PREMISGEN_RIGHTS_RESTRICTION": ("rights", "restriction"),
    "PREMISGEN_OUTPUT_FILENAME": ("output", "filename"),
}


def _apply_section(target: Any, data: dict, path: str, strict: bool) -> None:
    known = {f.name: f for f in fields(target)}
    for key, value in data.items():
        if key not in known:
            if strict:
                raise ConfigurationError(f"Unknown config key: {path}.{key}")
            continue
        current = getattr(target, key)
        if is_dataclass(current):
            if not isinstance(value, dict):
                raise ConfigurationError(f"{path}.{key} must be a mapping")
            _apply_section(current, value, f"{path}.{key}", strict)
        else:
            setattr(target, key, _coerce(current, value, f"{path}.{key}"))


def _coerce(current: Any, value: Any, key: str) -> Any:
    if isinstance(current, bool):
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)
    if isinstance(current, int):
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"{key} must be an integer, got {value!r}") from None
    return str(value)


def _apply_dict(config: PremisgenConfig, data: dict, strict: bool = False) -> None:
    """Apply a dict of values onto a PremisgenConfig."""
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration must be a mapping")
    for section in PROFILE_SECTIONS:
        if section in data and data[section] is not None:
            if not isinstance(data[section], dict):
                raise ConfigurationError(f"{section} must be a mapping")
            _apply_section(getattr(config, section), data[section], section, strict)
    if strict:
        unknown = sorted(set(data) - set(PROFILE_SECTIONS))
        if unknown:
            raise ConfigurationError(f"Unknown config sections: {', '.join(unknown)}")


def _apply_env_vars(config: PremisgenConfig) -> None:
    for var, path in ENV_VARS.items():
        val = os.environ.get(var)
        if not val:
            continue
        target: Any = config
        for part in path[:-1]:
            target = getattr(target, part)
        try:
            setattr(target, path[-1], _coerce(getattr(target, path[-1]), val, var))
        except ConfigurationError as exc:
            logger.warning("Ignoring %s: %s", var, exc)


# =============================================================================
# Profiles
# =============================================================================


def load_profile(path: Path | str) -> dict[str, Any]:
    """Read a YAML build profile.

    Raises:
        ConfigurationError: if the file is missing, unreadable or not a mapping.
    """
    path = Path(path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"Profile not found: {path}") from None
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Cannot read profile {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Profile {path} must contain a mapping")
    return data


def apply_profile(config: PremisgenConfig, path: Path | str) -> PremisgenConfig:
    """Load a YAML profile and return ``config`` with it applied."""
    return config.with_profile(load_profile(path))


# =============================================================================
# .env loading
# =============================================================================

_dotenv_loaded = False


def _ensure_dotenv() -> None:
    """Load .env file into os.environ if not already loaded."""
    global _dotenv_loaded
    if not _dotenv_loaded:
        _dotenv_loaded = True
        dotenv_path = find_dotenv(usecwd=True)
        if dotenv_path:
            load_dotenv(dotenv_path=dotenv_path, override=False)


# =============================================================================
# Global config instance
# =============================================================================

_config: PremisgenConfig | None = None


def get_config() -> PremisgenConfig:
    """Get the global config instance.

    Loads from config file + env vars on first call.
    """
    global _config
    if _config is None:
        _config = PremisgenConfig.load()
    return _config


def configure(config: PremisgenConfig) -> None:
    """Set the global config programmatically."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global config (forces reload on next get_config())."""
    global _config
    _config = None
