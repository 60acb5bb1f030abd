import os
from dataclasses import dataclass
from typing import Any, Optional
from omegaconf import OmegaConf, DictConfig, ListConfig

from caseta_codec.caseta.types import (
    CONNECT_TIMEOUT,
    DEFAULT_PORT,
    LOGIN_TIMEOUT,
    ConfigurationError,
)

DEFAULT_CONFIG_PATH = "config.yml"

# Environment variables that override keys from the config file
ENV_OVERRIDES = {
    "CASETA_HOST": "caseta.host",
    "CASETA_PORT": "caseta.port",
    "CASETA_USERNAME": "caseta.username",
    "CASETA_PASSWORD": "caseta.password",
}

DEFAULTS = {
    "caseta": {
        "host": None,
        "port": DEFAULT_PORT,
        "username": None,
        "password": None,
        "connect_timeout": CONNECT_TIMEOUT,
        "login_timeout": LOGIN_TIMEOUT,
        "idle_timeout": None,
        "strict": True,
    },
}


class CasetaConfig:
    def __init__(self, config: DictConfig | ListConfig):
        self._config = config

    def get(self, key: str, default: Any = None) -> Any:
        return OmegaConf.select(self._config, key, default=default)

    def set(self, key: str, value: Any) -> None:
        OmegaConf.update(self._config, key, value, merge=False)

    def __getattr__(self, name: str) -> Any:
        return self.get(name)


def load_config(path: str = DEFAULT_CONFIG_PATH, environ: Optional[dict[str, str]] = None) -> CasetaConfig:
    """
    Build the configuration from defaults, the YAML file at path (if it
    exists) and CASETA_* environment variables, later sources winning.
    """
    if environ is None:
        environ = dict(os.environ)

    sources = [OmegaConf.create(DEFAULTS)]
    if os.path.exists(path):
        sources.append(OmegaConf.load(path))

    overrides = OmegaConf.create()
    for variable, key in ENV_OVERRIDES.items():
        if variable in environ:
            OmegaConf.update(overrides, key, environ[variable])
    sources.append(overrides)

    return CasetaConfig(OmegaConf.merge(*sources))


@dataclass(frozen=True)
class BridgeSettings:
    host: str
    port: int
    username: str
    password: str
    connect_timeout: float = CONNECT_TIMEOUT
    login_timeout: Optional[float] = LOGIN_TIMEOUT
    idle_timeout: Optional[float] = None
    strict: bool = True

    @classmethod
    def from_config(cls, config: CasetaConfig) -> "BridgeSettings":
        """
        Raises:
            ConfigurationError: If a required setting is missing or malformed
        """
        missing = [
            key for key in ("host", "port", "username", "password")
            if config.get(f"caseta.{key}") in (None, "")
        ]
        if missing:
            raise ConfigurationError(
                "Missing required bridge settings: " + ", ".join(f"caseta.{key}" for key in missing)
            )

        port_value = config.get("caseta.port")
        try:
            port = int(port_value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"{port_value} is not a valid port") from None
        if not 0 < port < 65536:
            raise ConfigurationError(f"{port_value} is not a valid port")

        return cls(
            host=str(config.get("caseta.host")),
            port=port,
            username=str(config.get("caseta.username")),
            password=str(config.get("caseta.password")),
            connect_timeout=_to_timeout(config, "caseta.connect_timeout", CONNECT_TIMEOUT, required=True),
            login_timeout=_to_timeout(config, "caseta.login_timeout", LOGIN_TIMEOUT),
            idle_timeout=_to_timeout(config, "caseta.idle_timeout", None),
            strict=_to_bool(config, "caseta.strict", True),
        )


def _to_timeout(config: CasetaConfig, key: str, default: Optional[float], required: bool = False) -> Optional[float]:
    value = config.get(key, default)
    if value is None:
        if required:
            raise ConfigurationError(f"{key}: a timeout is required")
        return None
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key}: {value} is not a number of seconds") from None
    if timeout <= 0:
        raise ConfigurationError(f"{key}: timeout must be positive")
    return timeout


def _to_bool(config: CasetaConfig, key: str, default: bool) -> bool:
    value = config.get(key, default)
    if not isinstance(value, bool):
        raise ConfigurationError(f"{key}: {value!r} is not true or false")
    return value
