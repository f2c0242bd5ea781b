from dataclasses import asdict, dataclass
import logging
import os
from pathlib import Path

from dotenv import load_dotenv
import yaml

from .errors import ValidationError


logger = logging.getLogger(__name__)

GLOBAL_CONFIG_DIR = Path.home() / ".codebuddy"
API_KEY_ENV = "GEMINI_API_KEY"
DEFAULT_MODEL = "gemini-2.5-flash"
GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_EXPORT_FILENAME = "gemini-prompts.json"


@dataclass
class BuddyConfig:
    """User-editable settings from ~/.codebuddy/config.yaml."""

    api_key: str = ""
    model: str = DEFAULT_MODEL
    base_url: str = GEMINI_BASE_URL
    export_filename: str = DEFAULT_EXPORT_FILENAME


class ConfigManager:
    def __init__(self, config_dir: str | Path | None = None):
        self.config_dir = Path(config_dir) if config_dir else GLOBAL_CONFIG_DIR

    @property
    def config_path(self) -> Path:
        return self.config_dir / "config.yaml"

    @property
    def state_path(self) -> Path:
        """Global key-value storage shared by every session."""
        return self.config_dir / "state.json"

    def load_config(self) -> BuddyConfig:
        """Read config.yaml into BuddyConfig. Missing keys use defaults."""
        if not self.config_path.is_file():
            return BuddyConfig()

        try:
            data = yaml.safe_load(self.config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ValidationError(f"Invalid config file {self.config_path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ValidationError(f"Invalid config file {self.config_path}: expected a mapping")

        defaults = BuddyConfig()
        kwargs = {}
        for field_name in BuddyConfig.__dataclass_fields__:
            value = data.get(field_name, getattr(defaults, field_name))
            kwargs[field_name] = "" if value is None else str(value)
        return BuddyConfig(**kwargs)

    def save_config(self, config: BuddyConfig) -> None:
        """Write BuddyConfig to config.yaml."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        self.config_path.write_text(
            yaml.safe_dump(asdict(config), default_flow_style=False, sort_keys=False),
            encoding="utf-8",
        )

    def save_api_key(self, api_key: str) -> None:
        """Persist an API key and export it for the current process."""
        api_key = (api_key or "").strip()
        if not api_key:
            raise ValidationError("API key must not be empty")
        config = self.load_config()
        config.api_key = api_key
        self.save_config(config)
        os.environ[API_KEY_ENV] = api_key

    def resolve_api_key(self) -> str | None:
        """Return the Gemini API key, or None when none is configured.

        GEMINI_API_KEY (including one from a .env file) wins over config.yaml.
        """
        load_dotenv()
        env_key = os.environ.get(API_KEY_ENV, "").strip()
        if env_key:
            return env_key

        file_key = self.load_config().api_key.strip()
        if file_key:
            logger.debug("Using API key from %s", self.config_path)
            return file_key
        return None
