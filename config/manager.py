import os
from pathlib import Path
from typing import Dict, Any, Optional
from config.types import AzureDevOpsSettings
import logging


class EnvironmentManager:
    """
    Environment manager holding the server settings and the Azure DevOps
    connection parameters, loaded from a .env file and the OS environment.
    """

    _instance = None

    # Default settings with their types
    DEFAULT_SETTINGS = {
        # Tool history settings
        "tool_history_enabled": (True, bool),
        "tool_history_path": (".history", str),
        # Server settings
        "server_port": (8000, int),
        "log_level": ("INFO", str),
    }

    # Default Azure DevOps settings with their types
    DEFAULT_AZDO_SETTINGS = {
        "org": ("msazure", str),
        "project": ("Azure AppConfig", str),
        "creator_id": ("85430e72-a10b-4adf-b0df-a060884cdee9", str),
        "api_version": ("7.0", str),
        "request_timeout": (None, float),
        "pat": (None, str),
    }

    AZDO_PREFIX = "AZURE_DEVOPS_"

    # Each setting can be set via its uppercase env var
    ENV_MAPPING = {setting.upper(): setting for setting in DEFAULT_SETTINGS.keys()}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        """Initialize environment with default values"""
        self.azdo_parameters: Dict[str, Any] = {}
        self.settings: Dict[str, Any] = {}
        self._loaded = False
        self.logger = logging.getLogger(__name__)

        for key, (default_value, _) in self.DEFAULT_SETTINGS.items():
            self.settings[key] = default_value

        self._load_from_env_file()

    def _get_git_root(self) -> Optional[Path]:
        """Walk up from the current directory looking for a .git folder"""
        dir_to_check = Path.cwd()
        while dir_to_check != dir_to_check.parent:
            if (dir_to_check / ".git").exists():
                return dir_to_check
            dir_to_check = dir_to_check.parent
        return None

    def _convert_value(self, value: str, target_type: type) -> Any:
        """Convert string value to target type"""
        if target_type == bool:
            return value.lower() in ("true", "1", "yes", "on")
        return target_type(value)

    def _load_from_env_file(self):
        """Find and load variables from the first .env file found"""
        env_file_paths = [Path.cwd() / ".env"]

        try:
            env_file_paths.append(Path.home() / ".env")
        except (RuntimeError, OSError):
            # Home directory can't be determined
            pass

        git_root = self._get_git_root()
        if git_root:
            env_file_paths.append(git_root / ".env")

        for env_path in env_file_paths:
            if env_path.exists() and env_path.is_file():
                self.logger.info(f"Loading environment from: {env_path}")
                self._parse_env_file(env_path)
                return

        self.logger.debug(
            "No .env file found, tried: "
            + ", ".join(str(path) for path in env_file_paths)
        )

    def _apply_variable(self, key: str, value: str):
        """Route a single variable to settings or Azure DevOps parameters"""
        if key in self.ENV_MAPPING:
            setting_name = self.ENV_MAPPING[key]
            _, target_type = self.DEFAULT_SETTINGS[setting_name]
            try:
                self.settings[setting_name] = self._convert_value(value, target_type)
            except ValueError as e:
                self.logger.warning(f"Ignoring invalid value for {key}: {e}")
        elif key.startswith(self.AZDO_PREFIX):
            param_name = key[len(self.AZDO_PREFIX):].lower()
            self.azdo_parameters[param_name] = value

    def _parse_env_file(self, env_file_path: Path):
        """Parse a .env file and load variables into environment"""
        try:
            with open(env_file_path, "r") as f:
                for line in f:
                    line = line.strip()
                    if line and not line.startswith("#") and "=" in line:
                        key, value = line.split("=", 1)
                        key = key.strip()
                        value = value.strip()

                        # Remove quotes if present
                        if (value.startswith('"') and value.endswith('"')) or (
                            value.startswith("'") and value.endswith("'")
                        ):
                            value = value[1:-1]

                        self._apply_variable(key, value)
        except OSError as e:
            self.logger.error(f"Error parsing .env file {env_file_path}: {e}")

    def load(self):
        """Load all environment information"""
        self._load_from_env_file()

        for key, value in os.environ.items():
            self._apply_variable(key, value)

        self._loaded = True
        return self

    def ensure_loaded(self):
        """Load the environment unless a previous call already did"""
        if not self._loaded:
            self.load()
        return self

    def get_setting(self, name: str, default: Any = None) -> Any:
        """Get a setting value by name"""
        return self.settings.get(name, default)

    def get_azdo_parameters(self) -> Dict[str, Any]:
        """Get Azure DevOps parameters with defaults applied"""
        result = {}
        for key, (default_value, _) in self.DEFAULT_AZDO_SETTINGS.items():
            result[key] = default_value

        # Empty values fall back to the defaults
        for key, value in self.azdo_parameters.items():
            if value not in (None, ""):
                result[key] = value

        return result

    def get_azdo_parameter(self, name: str, default: Any = None) -> Any:
        """Get a specific Azure DevOps parameter"""
        value = self.get_azdo_parameters().get(name)
        return default if value is None else value

    def get_azdo_settings(self) -> AzureDevOpsSettings:
        """Get the Azure DevOps parameters as a typed settings object"""
        return AzureDevOpsSettings(**self.get_azdo_parameters())

    def is_tool_history_enabled(self) -> bool:
        """Check if tool invoke history is enabled"""
        return self.get_setting("tool_history_enabled", True)

    def get_tool_history_path(self) -> str:
        """Get the path for storing tool invoke history"""
        return self.get_setting("tool_history_path", ".history")

    def get_all_configuration(self) -> Dict[str, Any]:
        """Get all configuration with the access token redacted"""
        azdo_parameters = self.get_azdo_parameters()
        if azdo_parameters.get("pat"):
            azdo_parameters["pat"] = "***"

        return {
            "settings": dict(self.settings),
            "azdo_parameters": azdo_parameters,
            "env_mapping": dict(self.ENV_MAPPING),
        }


# Create singleton instance
env_manager = EnvironmentManager()
