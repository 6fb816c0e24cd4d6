"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import re
import tomllib
from dataclasses import dataclass
from pathlib import Path

CONFIG_FILE_NAME = "resolver_sync.toml"

DEFAULT_ROOT_CONTRACT = "ResolverRoot"
DEFAULT_CONTRACT_SUFFIX = "Resolver"
DEFAULT_ROOT_RECEIVER = "Resolver"
DEFAULT_BASE_FILE = "base.go"
DEFAULT_FORMATTER_COMMAND = ("goimports", "-srcdir", "{srcdir}")
DEFAULT_FORMATTER_TIMEOUT_SECONDS = 10.0
MAX_FORMATTER_TIMEOUT_SECONDS = 600.0

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(slots=True, frozen=True)
class ContractConfig:
    """Where the generated interfaces live and how they are named."""

    dir: Path | None
    root: str
    suffix: str
    qualifier: str | None
    import_path: str | None


@dataclass(slots=True, frozen=True)
class ImplementationConfig:
    """Where the hand-written resolvers live."""

    dir: Path | None
    root_receiver: str
    base_file: str


@dataclass(slots=True, frozen=True)
class FormatterConfig:
    """External formatter invocation settings."""

    enabled: bool
    command: tuple[str, ...]
    timeout_seconds: float


@dataclass(slots=True, frozen=True)
class LoggingConfig:
    """Structured event log settings."""

    event_log: Path | None


@dataclass(slots=True, frozen=True)
class SyncConfig:
    """Fully merged synchronizer configuration."""

    project_root: Path
    contract: ContractConfig
    implementation: ImplementationConfig
    formatter: FormatterConfig
    logging: LoggingConfig

    @property
    def contract_dir(self) -> Path:
        if self.contract.dir is None:
            raise ValueError("Config field 'contract.dir' must be set.")
        return self.contract.dir

    @property
    def implementation_dir(self) -> Path:
        if self.implementation.dir is None:
            raise ValueError("Config field 'implementation.dir' must be set.")
        return self.implementation.dir

    def validate(self) -> None:
        """Raise ValueError when a setting required for a run is missing."""
        if self.contract.dir is None:
            raise ValueError("Config field 'contract.dir' must be set.")
        if self.implementation.dir is None:
            raise ValueError("Config field 'implementation.dir' must be set.")

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot for event logs."""
        return {
            "project_root": str(self.project_root),
            "contract": {
                "dir": _optional_str(self.contract.dir),
                "root": self.contract.root,
                "suffix": self.contract.suffix,
                "qualifier": self.contract.qualifier,
                "import_path": self.contract.import_path,
            },
            "implementation": {
                "dir": _optional_str(self.implementation.dir),
                "root_receiver": self.implementation.root_receiver,
                "base_file": self.implementation.base_file,
            },
            "formatter": {
                "enabled": self.formatter.enabled,
                "command": list(self.formatter.command),
                "timeout_seconds": self.formatter.timeout_seconds,
            },
            "logging": {
                "event_log": _optional_str(self.logging.event_log),
            },
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    contract_dir: Path | None = None
    implementation_dir: Path | None = None
    contract_qualifier: str | None = None
    contract_import_path: str | None = None
    formatter_enabled: bool | None = None
    formatter_timeout_seconds: float | None = None
    event_log: Path | None = None


def default_config(project_root: Path) -> SyncConfig:
    """Build default config for a given project root."""
    resolved_root = project_root.resolve()
    return SyncConfig(
        project_root=resolved_root,
        contract=ContractConfig(
            dir=None,
            root=DEFAULT_ROOT_CONTRACT,
            suffix=DEFAULT_CONTRACT_SUFFIX,
            qualifier=None,
            import_path=None,
        ),
        implementation=ImplementationConfig(
            dir=None,
            root_receiver=DEFAULT_ROOT_RECEIVER,
            base_file=DEFAULT_BASE_FILE,
        ),
        formatter=FormatterConfig(
            enabled=True,
            command=DEFAULT_FORMATTER_COMMAND,
            timeout_seconds=DEFAULT_FORMATTER_TIMEOUT_SECONDS,
        ),
        logging=LoggingConfig(event_log=None),
    )


def load_config_file(config_path: Path) -> dict[str, object]:
    """Load an optional TOML config file; a missing file yields an empty payload."""
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{config_path.name} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _optional_string(value: object, name: str, default: str | None) -> str | None:
    if value is None:
        return default
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Config field '{name}' must be a non-empty string.")
    return value.strip()


def _identifier(value: object, name: str, default: str) -> str:
    result = _optional_string(value, name, default)
    if result is None or not _IDENTIFIER_RE.match(result):
        raise ValueError(f"Config field '{name}' must be a Go identifier.")
    return result


def _optional_path(value: object, name: str, default: Path | None, root: Path) -> Path | None:
    if value is None:
        return default
    if isinstance(value, Path):
        return (root / value).resolve()
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Config field '{name}' must be a non-empty string path.")
    return (root / value.strip()).resolve()


def _tuple_of_strings(value: object, section: str, field: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{section}.{field}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{section}.{field}' must contain only strings.")
        output.append(item)
    if not output:
        raise ValueError(f"Config field '{section}.{field}' must not be empty.")
    return tuple(output)


def _optional_bool(value: object, name: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"Config field '{name}' must be a boolean.")
    return value


def _optional_timeout(value: object, name: str, default: float) -> float:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ValueError(f"Config field '{name}' must be a positive number.")
    if value > MAX_FORMATTER_TIMEOUT_SECONDS:
        raise ValueError(f"Config field '{name}' must be <= {MAX_FORMATTER_TIMEOUT_SECONDS:g}.")
    return float(value)


def _base_file_name(value: object, name: str, default: str) -> str:
    result = _optional_string(value, name, default) or default
    if "/" in result or "\\" in result or not result.endswith(".go"):
        raise ValueError(f"Config field '{name}' must be a .go file name without directories.")
    if result.endswith("_test.go"):
        raise ValueError(f"Config field '{name}' must not name a _test.go file.")
    return result


def merge_config(
    base: SyncConfig, file_payload: dict[str, object], overrides: CliOverrides
) -> SyncConfig:
    """Merge defaults, config file, then CLI/startup overrides."""
    root = base.project_root
    contract_payload = _get_table(file_payload, "contract")
    implementation_payload = _get_table(file_payload, "implementation")
    formatter_payload = _get_table(file_payload, "formatter")
    logging_payload = _get_table(file_payload, "logging")

    contract = ContractConfig(
        dir=_optional_path(contract_payload.get("dir"), "contract.dir", base.contract.dir, root),
        root=_identifier(contract_payload.get("root"), "contract.root", base.contract.root),
        suffix=_identifier(contract_payload.get("suffix"), "contract.suffix", base.contract.suffix),
        qualifier=_optional_string(
            contract_payload.get("qualifier"), "contract.qualifier", base.contract.qualifier
        ),
        import_path=_optional_string(
            contract_payload.get("import_path"), "contract.import_path", base.contract.import_path
        ),
    )
    if contract.qualifier is not None and not _IDENTIFIER_RE.match(contract.qualifier):
        raise ValueError("Config field 'contract.qualifier' must be a Go identifier.")

    implementation = ImplementationConfig(
        dir=_optional_path(
            implementation_payload.get("dir"),
            "implementation.dir",
            base.implementation.dir,
            root,
        ),
        root_receiver=_identifier(
            implementation_payload.get("root_receiver"),
            "implementation.root_receiver",
            base.implementation.root_receiver,
        ),
        base_file=_base_file_name(
            implementation_payload.get("base_file"),
            "implementation.base_file",
            base.implementation.base_file,
        ),
    )

    command = base.formatter.command
    if "command" in formatter_payload:
        command = _tuple_of_strings(formatter_payload["command"], "formatter", "command")
    formatter = FormatterConfig(
        enabled=_optional_bool(
            formatter_payload.get("enabled"), "formatter.enabled", base.formatter.enabled
        ),
        command=command,
        timeout_seconds=_optional_timeout(
            formatter_payload.get("timeout_seconds"),
            "formatter.timeout_seconds",
            base.formatter.timeout_seconds,
        ),
    )

    logging = LoggingConfig(
        event_log=_optional_path(
            logging_payload.get("event_log"), "logging.event_log", base.logging.event_log, root
        )
    )

    merged = SyncConfig(
        project_root=root,
        contract=contract,
        implementation=implementation,
        formatter=formatter,
        logging=logging,
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: SyncConfig, overrides: CliOverrides) -> SyncConfig:
    """Apply startup overrides at highest precedence."""
    root = config.project_root
    qualifier = _optional_string(
        overrides.contract_qualifier, "overrides.contract_qualifier", config.contract.qualifier
    )
    if qualifier is not None and not _IDENTIFIER_RE.match(qualifier):
        raise ValueError("Config field 'overrides.contract_qualifier' must be a Go identifier.")
    contract = ContractConfig(
        dir=_optional_path(
            overrides.contract_dir, "overrides.contract_dir", config.contract.dir, root
        ),
        root=config.contract.root,
        suffix=config.contract.suffix,
        qualifier=qualifier,
        import_path=_optional_string(
            overrides.contract_import_path,
            "overrides.contract_import_path",
            config.contract.import_path,
        ),
    )
    implementation = ImplementationConfig(
        dir=_optional_path(
            overrides.implementation_dir,
            "overrides.implementation_dir",
            config.implementation.dir,
            root,
        ),
        root_receiver=config.implementation.root_receiver,
        base_file=config.implementation.base_file,
    )
    formatter = FormatterConfig(
        enabled=(
            overrides.formatter_enabled
            if overrides.formatter_enabled is not None
            else config.formatter.enabled
        ),
        command=config.formatter.command,
        timeout_seconds=_optional_timeout(
            overrides.formatter_timeout_seconds,
            "overrides.formatter_timeout_seconds",
            config.formatter.timeout_seconds,
        ),
    )
    logging = LoggingConfig(
        event_log=_optional_path(
            overrides.event_log, "overrides.event_log", config.logging.event_log, root
        )
    )
    return SyncConfig(
        project_root=root,
        contract=contract,
        implementation=implementation,
        formatter=formatter,
        logging=logging,
    )


def load_effective_config(
    project_root: Path,
    config_path: Path | None = None,
    overrides: CliOverrides | None = None,
) -> SyncConfig:
    """Load effective config using merge order defaults -> config file -> overrides."""
    resolved_root = project_root.resolve()
    base = default_config(resolved_root)
    payload = load_config_file(config_path or resolved_root / CONFIG_FILE_NAME)
    return merge_config(base, payload, overrides or CliOverrides())


def _optional_str(value: Path | None) -> str | None:
    return str(value) if value is not None else None
