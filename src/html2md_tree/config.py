from __future__ import annotations

import json
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping


CONFIG_FILE = Path("config.toml")
ENV_PREFIX = "HTML2MD_"

DEFAULT_SOURCE_DIR = Path("./html_files")
DEFAULT_TARGET_DIR = Path("./markdown_files")
DEFAULT_DOMAIN = "domain.com"
DEFAULT_MARKITDOWN_COMMAND: tuple[str, ...] = ("markitdown",)


@dataclass(slots=True)
class ConverterConfig:
    source_dir: Path = DEFAULT_SOURCE_DIR
    target_dir: Path = DEFAULT_TARGET_DIR
    use_markitdown: bool = False
    domain: str = DEFAULT_DOMAIN
    markitdown_command: tuple[str, ...] = DEFAULT_MARKITDOWN_COMMAND
    encoding: str = "utf-8"


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"
    run_log: Path | None = None


@dataclass(slots=True)
class AppConfig:
    converter: ConverterConfig = field(default_factory=ConverterConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _read_toml(path: Path) -> Mapping[str, object]:
    if not path.exists():
        return {}
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _tuple_of_strings(value: object | None, default: Iterable[str]) -> tuple[str, ...]:
    if not value:
        return tuple(default)
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Iterable):
        return tuple(str(item) for item in value)
    raise TypeError(f"Unsupported command configuration: {value!r}")


def _build_converter(data: Mapping[str, object] | None) -> ConverterConfig:
    if not data:
        return ConverterConfig()
    return ConverterConfig(
        source_dir=Path(str(data.get("source_dir", DEFAULT_SOURCE_DIR))),
        target_dir=Path(str(data.get("target_dir", DEFAULT_TARGET_DIR))),
        use_markitdown=bool(data.get("use_markitdown", False)),
        domain=str(data.get("domain", DEFAULT_DOMAIN)),
        markitdown_command=_tuple_of_strings(
            data.get("markitdown_command"), DEFAULT_MARKITDOWN_COMMAND
        ),
        encoding=str(data.get("encoding", "utf-8")),
    )


def _build_logging(data: Mapping[str, object] | None) -> LoggingConfig:
    if not data:
        return LoggingConfig()
    run_log = str(data.get("run_log", "") or "")
    return LoggingConfig(
        level=str(data.get("level", "INFO")).upper(),
        run_log=Path(run_log) if run_log else None,
    )


def config_path_from_env() -> Path:
    config_env = os.getenv(f"{ENV_PREFIX}CONFIG_PATH")
    return Path(config_env) if config_env else CONFIG_FILE


def load_config(path: Path | None = None) -> AppConfig:
    path = path or config_path_from_env()
    raw = _read_toml(path)
    converter_data = raw.get("converter") if isinstance(raw, Mapping) else None
    logging_data = raw.get("logging") if isinstance(raw, Mapping) else None
    converter = _build_converter(converter_data if isinstance(converter_data, Mapping) else None)
    log_config = _build_logging(logging_data if isinstance(logging_data, Mapping) else None)
    level_env = os.getenv(f"{ENV_PREFIX}LOG_LEVEL")
    if level_env:
        log_config.level = level_env.strip().upper()
    return AppConfig(converter=converter, logging=log_config)


def dump_config(config: AppConfig) -> str:
    payload = {
        "converter": {
            "source_dir": str(config.converter.source_dir),
            "target_dir": str(config.converter.target_dir),
            "use_markitdown": config.converter.use_markitdown,
            "domain": config.converter.domain,
            "markitdown_command": list(config.converter.markitdown_command),
            "encoding": config.converter.encoding,
        },
        "logging": {
            "level": config.logging.level,
            "run_log": str(config.logging.run_log) if config.logging.run_log else "",
        },
    }
    return json.dumps(payload, indent=2)
