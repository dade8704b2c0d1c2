"""
설정 로드: 기본값 → YAML 파일 → 환경 변수.

우선순위 (뒤가 이김):
1. DEFAULT_CONFIG
2. crud-scaffold.yaml (작업 디렉토리) 또는 명시적 --config
3. 환경 변수 (.env 포함, python-dotenv)
"""

import copy
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from crud_scaffold.domain.errors import ConfigError
from crud_scaffold.domain.schemas import IdType

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "crud-scaffold.yaml"
ENV_PREFIX = "CRUD_SCAFFOLD_"

DEFAULT_CONFIG: dict[str, Any] = {
    "paths": {
        "custom_templates": None,
        "output_root": ".",
        "logs_dir": None,
    },
    "generation": {
        "strict": False,
        "overwrite": False,
        "allow_partial": False,
        "default_preset": "crud",
        "default_id_type": "Guid",
    },
    "logging": {
        "level": "INFO",
    },
    "reserved_identifiers": {
        "extra": [],
    },
}

# 환경 변수 → (섹션, 키, 타입)
ENV_OVERRIDES = {
    "CUSTOM_TEMPLATES": ("paths", "custom_templates", str),
    "OUTPUT_ROOT": ("paths", "output_root", str),
    "LOGS_DIR": ("paths", "logs_dir", str),
    "STRICT": ("generation", "strict", bool),
    "LOG_LEVEL": ("logging", "level", str),
}

_TRUE_VALUES = frozenset(["1", "true", "yes", "on"])
_FALSE_VALUES = frozenset(["0", "false", "no", "off", ""])

LOG_LEVELS = frozenset(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])


# =============================================================================
# Loading
# =============================================================================


def load_config(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
    use_dotenv: bool = True,
) -> dict[str, Any]:
    """
    설정 로드 + 검증.

    Args:
        config_path: YAML 파일 경로 (없으면 작업 디렉토리의 crud-scaffold.yaml)
        environ: 환경 변수 (테스트용, 기본 os.environ)
        use_dotenv: .env 파일 로드 여부

    Returns:
        병합된 설정 dict

    Raises:
        ConfigError: 파일 없음 (명시 경로), YAML 오류, 잘못된 타입
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path is not None:
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}", path=str(config_path))
        _merge(config, _read_yaml(config_path))
    else:
        default_path = Path.cwd() / CONFIG_FILENAME
        if default_path.exists():
            _merge(config, _read_yaml(default_path))

    if environ is None:
        if use_dotenv:
            load_dotenv()
        environ = os.environ
    _apply_env(config, environ)

    _validate(config)
    return config


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file is not valid YAML: {e}", path=str(path)) from e

    if not isinstance(data, dict):
        raise ConfigError("Config root must be a mapping", path=str(path))

    logger.debug(f"Loaded config from {path}")
    return data


def _merge(base: dict[str, Any], override: Mapping[str, Any]) -> None:
    """섹션 단위 얕은 병합 (알 수 없는 섹션/키는 거절)."""
    for section, values in override.items():
        if section not in base:
            raise ConfigError(f"Unknown config section: {section}", section=section)
        if not isinstance(values, dict):
            raise ConfigError(f"Config section '{section}' must be a mapping", section=section)
        for key, value in values.items():
            if key not in base[section]:
                raise ConfigError(f"Unknown config key: {section}.{key}", section=section, key=key)
            base[section][key] = value


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}", variable=name)


def _apply_env(config: dict[str, Any], environ: Mapping[str, str]) -> None:
    for suffix, (section, key, kind) in ENV_OVERRIDES.items():
        name = ENV_PREFIX + suffix
        if name not in environ:
            continue
        raw = environ[name]
        config[section][key] = _parse_bool(name, raw) if kind is bool else raw


# =============================================================================
# Validation
# =============================================================================


def _validate(config: dict[str, Any]) -> None:
    for key in ("strict", "overwrite", "allow_partial"):
        if not isinstance(config["generation"][key], bool):
            raise ConfigError(f"generation.{key} must be a boolean", key=key)

    if not isinstance(config["generation"]["default_preset"], str):
        raise ConfigError("generation.default_preset must be a string")

    try:
        IdType.parse(config["generation"]["default_id_type"])
    except ValueError as e:
        raise ConfigError(str(e), key="default_id_type") from e

    for key, value in config["paths"].items():
        if value is not None and not isinstance(value, str):
            raise ConfigError(f"paths.{key} must be a string", key=key)

    level = config["logging"]["level"]
    if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
        raise ConfigError(f"logging.level must be one of {sorted(LOG_LEVELS)}", level=level)
    config["logging"]["level"] = level.upper()

    extra = config["reserved_identifiers"]["extra"]
    if not isinstance(extra, list) or not all(isinstance(x, str) for x in extra):
        raise ConfigError("reserved_identifiers.extra must be a list of strings")


# =============================================================================
# Accessors
# =============================================================================


def get_path(config: Mapping[str, Any], key: str) -> Path | None:
    """paths.<key> → Path (미설정이면 None)."""
    value = config["paths"].get(key)
    return Path(value).expanduser() if value else None
