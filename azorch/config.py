"""
Configuration management for azorch.

Two layers of configuration feed a deployment:

1. Adapter config: $AZORCH_HOME/config.yaml (default ~/.config/azorch).
   Holds the Azkaban credentials and server URL (required at construction)
   plus project defaults and logging settings.
2. Spec config: the flat, dotted config bag carried by each JobSpec.
   Keys in the "azkaban." namespace steer the translation; they fall back to
   the adapter defaults (see AzorchConfig.spec_defaults).
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from azorch.errors import AzorchError, SpecTypeError
from azorch.utils import get_bool


# Spec config keys (flat, dotted)
AZKABAN_NAMESPACE = "azkaban."
AZKABAN_SERVER_URL_KEY = "azkaban.server.url"
AZKABAN_PROJECT_NAME_PREFIX_KEY = "azkaban.project.name_prefix"
AZKABAN_PROJECT_DESCRIPTION_KEY = "azkaban.project.description"
AZKABAN_PROJECT_FLOW_NAME_KEY = "azkaban.project.flow_name"
AZKABAN_PROJECT_GROUP_ADMINS_KEY = "azkaban.project.group_admin_users"
AZKABAN_PROJECT_USER_TO_PROXY_KEY = "azkaban.project.user_to_proxy"
AZKABAN_PROJECT_OVERWRITE_IF_EXISTS_KEY = "azkaban.project.overwrite_if_exists"
AZKABAN_SCHEDULE_CRON_KEY = "azkaban.schedule.cron"
JOB_SCHEDULE_KEY = "job.schedule"

DEFAULT_PROJECT_NAME_PREFIX = "azorch"
DEFAULT_FLOW_NAME = "main"
# Quartz cron: every day at midnight
DEFAULT_SCHEDULE_CRON = "0 0 0 ? * *"
DEFAULT_HTTP_TIMEOUT_S = 30.0

CONFIG_TEMPLATE = """\
azkaban:
  username: azkaban
  password: ""            # or set AZKABAN_PASSWORD
  server_url: http://localhost:8081/
  timeout_s: 30

project:
  name_prefix: azorch
  flow_name: main
  # group_admin_users: [data-eng]
  # user_to_proxy: etl

logging:
  level: INFO
  format: pretty          # pretty | structured
  # file: ~/.config/azorch/logs/azorch.log
"""


class ConfigError(AzorchError):
    """Configuration validation error."""
    pass


@dataclass(frozen=True)
class AzorchConfig:
    """Adapter configuration loaded from config.yaml."""
    username: str
    password: str
    server_url: str
    http_timeout_s: float = DEFAULT_HTTP_TIMEOUT_S
    name_prefix: str = DEFAULT_PROJECT_NAME_PREFIX
    flow_name: str = DEFAULT_FLOW_NAME
    description: Optional[str] = None
    group_admin_users: Tuple[str, ...] = field(default_factory=tuple)
    user_to_proxy: Optional[str] = None
    serialize_by_name: bool = True
    log_level: str = "INFO"
    log_format: str = "pretty"
    log_file: Optional[str] = None

    def spec_defaults(self) -> Dict[str, Any]:
        """Project defaults expressed as spec config keys."""
        defaults: Dict[str, Any] = {
            AZKABAN_SERVER_URL_KEY: self.server_url,
            AZKABAN_PROJECT_NAME_PREFIX_KEY: self.name_prefix,
            AZKABAN_PROJECT_FLOW_NAME_KEY: self.flow_name,
        }
        if self.description:
            defaults[AZKABAN_PROJECT_DESCRIPTION_KEY] = self.description
        if self.group_admin_users:
            defaults[AZKABAN_PROJECT_GROUP_ADMINS_KEY] = ",".join(self.group_admin_users)
        if self.user_to_proxy:
            defaults[AZKABAN_PROJECT_USER_TO_PROXY_KEY] = self.user_to_proxy
        return defaults

    def get_log_file_path(self) -> Optional[Path]:
        """Get log file path, if file logging is enabled."""
        if not self.log_file:
            return None
        return Path(self.log_file).expanduser()

    def __repr__(self) -> str:
        # Never print the password
        return (
            f"AzorchConfig(server_url={self.server_url!r}, username={self.username!r}, "
            f"name_prefix={self.name_prefix!r})"
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AzorchConfig":
        """Build config from the parsed YAML document."""
        azkaban = data.get("azkaban") or {}
        project = data.get("project") or {}
        logging_cfg = data.get("logging") or {}

        missing = [k for k in ("username", "server_url") if not azkaban.get(k)]
        if missing:
            raise ConfigError(f"Missing required azkaban settings: {', '.join(missing)}")

        password = os.environ.get("AZKABAN_PASSWORD") or azkaban.get("password")
        if not password:
            raise ConfigError("Missing azkaban password (config or AZKABAN_PASSWORD)")

        group_admins = project.get("group_admin_users") or ()
        if isinstance(group_admins, str):
            group_admins = [g.strip() for g in group_admins.split(",") if g.strip()]

        try:
            timeout = float(azkaban.get("timeout_s", DEFAULT_HTTP_TIMEOUT_S))
        except (TypeError, ValueError):
            raise ConfigError(f"Invalid azkaban.timeout_s: {azkaban.get('timeout_s')!r}")

        try:
            serialize_by_name = get_bool(data, "serialize_by_name", True)
        except SpecTypeError as e:
            raise ConfigError(str(e)) from e

        return cls(
            username=str(azkaban["username"]),
            password=str(password),
            server_url=str(azkaban["server_url"]),
            http_timeout_s=timeout,
            name_prefix=project.get("name_prefix", DEFAULT_PROJECT_NAME_PREFIX),
            flow_name=project.get("flow_name", DEFAULT_FLOW_NAME),
            description=project.get("description"),
            group_admin_users=tuple(group_admins),
            user_to_proxy=project.get("user_to_proxy"),
            serialize_by_name=serialize_by_name,
            log_level=str(logging_cfg.get("level", "INFO")).upper(),
            log_format=logging_cfg.get("format", "pretty"),
            log_file=logging_cfg.get("file"),
        )


def get_azorch_home() -> Path:
    """Return the azorch config directory ($AZORCH_HOME or ~/.config/azorch)."""
    env_home = os.environ.get("AZORCH_HOME")
    if env_home:
        return Path(env_home)
    return Path("~/.config/azorch").expanduser()


def load_config(config_path: Optional[Path] = None) -> AzorchConfig:
    """
    Load adapter configuration from YAML file.

    Args:
        config_path: Path to config file. Defaults to $AZORCH_HOME/config.yaml

    Returns:
        AzorchConfig instance

    Raises:
        FileNotFoundError: If the config file does not exist
        ConfigError: If config is invalid
    """
    if config_path is None:
        config_path = get_azorch_home() / "config.yaml"

    if not config_path.exists():
        raise FileNotFoundError(
            f"azorch config.yaml not found at {config_path}. Run 'azorch init' to create one."
        )

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    if not data:
        raise ConfigError("Configuration file is empty")
    if not isinstance(data, dict):
        raise ConfigError("Configuration file must contain a mapping")

    return AzorchConfig.from_dict(data)


def write_config_template(config_path: Optional[Path] = None, force: bool = False) -> Path:
    """Write the config template. An existing file is only replaced with force."""
    if config_path is None:
        config_path = get_azorch_home() / "config.yaml"
    if config_path.exists() and not force:
        raise ConfigError(f"Config already exists: {config_path}")
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(CONFIG_TEMPLATE)
    config_path.chmod(0o600)
    return config_path
