"""
Configuration handling for the Flickr uploader.
"""

import json
import os
import re
from dataclasses import dataclass, field, asdict
from typing import Optional, List, Dict, Any

CONFIG_DIR_ENV = "FLICKR_UPLOADER_CONFIG_DIR"
CONFIG_FILENAME = "config.json"


class ConfigError(Exception):
    """Raised when the configuration is missing, unreadable or incomplete."""


@dataclass
class Album:
    """A Flickr photoset that photos can be added to."""
    id: str
    name: str = ""

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"


@dataclass
class RuleCondition:
    """Keyword conditions deciding whether a rule applies to an image."""
    excludes_all: List[str] = field(default_factory=list)
    excludes_any: List[str] = field(default_factory=list)
    includes_all: List[str] = field(default_factory=list)
    includes_any: List[str] = field(default_factory=list)


@dataclass
class RuleAction:
    """What happens when a rule applies."""
    delete: bool = False
    albums: List[Album] = field(default_factory=list)


@dataclass
class Rule:
    """A condition + action pair."""
    condition: RuleCondition = field(default_factory=RuleCondition)
    action: RuleAction = field(default_factory=RuleAction)


@dataclass
class FlickrConfig:
    """Flickr API credentials."""
    api_key: str = ""
    api_secret: str = ""
    oauth_token: str = ""
    oauth_secret: str = ""
    username: str = ""
    user_nsid: str = ""


@dataclass
class ToolConfig:
    """External command locations."""
    exiftool: str = ""


@dataclass
class UploadConfig:
    """Upload behaviour."""
    store_upload_list_in_image_dir: bool = True
    set_date_posted: bool = True
    fail_on_corrupt_ledger: bool = False


@dataclass
class AppConfig:
    """Main application configuration."""
    flickr: FlickrConfig = field(default_factory=FlickrConfig)
    cmd: ToolConfig = field(default_factory=ToolConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)
    rules: List[Rule] = field(default_factory=list)
    max_retries: int = 3
    force: bool = False
    dry_run: bool = False
    log_level: str = "INFO"
    log_file: Optional[str] = None
    debug_mode: bool = False
    tool_timeout: Optional[float] = None
    config_dir: str = ""


# Accept the camelCase spelling used by older configuration files
_CONDITION_ALIASES = {
    'excludesAll': 'excludes_all',
    'excludesAny': 'excludes_any',
    'includesAll': 'includes_all',
    'includesAny': 'includes_any',
}


def default_config_dir() -> str:
    """
    Directory holding the configuration file and the central upload ledger.

    Returns:
        ``$FLICKR_UPLOADER_CONFIG_DIR`` if set, otherwise ``~/.config/flickr-uploader``
    """
    env_dir = os.environ.get(CONFIG_DIR_ENV)
    if env_dir:
        return os.path.abspath(os.path.expanduser(env_dir))
    return os.path.join(os.path.expanduser("~"), ".config", "flickr-uploader")


def default_config_path() -> str:
    """Path of the configuration file used when none is given."""
    return os.path.join(default_config_dir(), CONFIG_FILENAME)


def _substitute_env_vars(value: Any) -> Any:
    """
    Substitute environment variables in string values.

    Args:
        value: Value to process for environment variables

    Returns:
        Value with environment variables substituted
    """
    if not isinstance(value, str):
        return value

    # Pattern to match ${ENV_VAR} syntax
    pattern = r'\${([^}]+)}'

    def replace_env_var(match):
        env_var = match.group(1)
        env_value = os.environ.get(env_var)
        if env_value is None:
            print(f"Warning: Environment variable {env_var} not found")
            return ""
        return env_value

    return re.sub(pattern, replace_env_var, value)


def _process_config_dict(config_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Process a configuration dictionary to substitute environment variables.

    Args:
        config_dict: Dictionary containing configuration values

    Returns:
        Processed dictionary with environment variables substituted
    """
    result = {}

    for key, value in config_dict.items():
        if isinstance(value, dict):
            result[key] = _process_config_dict(value)
        elif isinstance(value, list):
            result[key] = [
                _process_config_dict(item) if isinstance(item, dict) else _substitute_env_vars(item)
                for item in value
            ]
        else:
            result[key] = _substitute_env_vars(value)

    return result


def _keyword_list(value: Any, field_name: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise ConfigError(f"Rule field '{field_name}' must be a list of keywords")
    return [str(v) for v in value]


def _parse_album(album_dict: Any) -> Album:
    if not isinstance(album_dict, dict) or not album_dict.get('id'):
        raise ConfigError(f"Album must be an object with an 'id': {album_dict!r}")
    return Album(id=str(album_dict['id']), name=str(album_dict.get('name', '')))


def _parse_rule(rule_dict: Dict[str, Any]) -> Rule:
    """
    Build a Rule from its JSON representation.

    Args:
        rule_dict: Dictionary with ``condition`` and ``action`` keys

    Returns:
        Rule object

    Raises:
        ConfigError: If the rule contains unknown keys or malformed values
    """
    if not isinstance(rule_dict, dict):
        raise ConfigError(f"Rule must be an object: {rule_dict!r}")

    condition_dict = dict(rule_dict.get('condition') or {})
    action_dict = dict(rule_dict.get('action') or {})

    condition_kwargs = {}
    for key, value in condition_dict.items():
        name = _CONDITION_ALIASES.get(key, key)
        if name not in RuleCondition.__dataclass_fields__:
            raise ConfigError(f"Unknown rule condition: {key}")
        condition_kwargs[name] = _keyword_list(value, key)

    unknown = set(action_dict) - {'delete', 'albums'}
    if unknown:
        raise ConfigError(f"Unknown rule action: {', '.join(sorted(unknown))}")

    albums = [_parse_album(a) for a in action_dict.get('albums') or []]
    action = RuleAction(delete=bool(action_dict.get('delete', False)), albums=albums)

    return Rule(condition=RuleCondition(**condition_kwargs), action=action)


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load configuration from a JSON file.

    A missing file yields the defaults so that ``authenticate`` can create it.

    Args:
        config_path: Path to the configuration JSON file

    Returns:
        AppConfig object

    Raises:
        ConfigError: If the file cannot be parsed or contains invalid values
    """
    config_path = os.path.abspath(os.path.expanduser(config_path or default_config_path()))
    config_dir = os.path.dirname(config_path)

    if not os.path.exists(config_path):
        return AppConfig(config_dir=config_dir)

    try:
        with open(config_path, 'r', encoding='utf-8') as cfg:
            config_dict = json.load(cfg)
    except (json.JSONDecodeError, IOError) as e:
        raise ConfigError(f"Failed to load configuration from {config_path}: {str(e)}")

    if not isinstance(config_dict, dict):
        raise ConfigError(f"Configuration in {config_path} must be a JSON object")

    config_dict = _process_config_dict(config_dict)

    try:
        flickr = FlickrConfig(**config_dict.pop('flickr', {}))
        cmd = ToolConfig(**config_dict.pop('cmd', {}))
        upload = UploadConfig(**config_dict.pop('upload', {}))
        rules = [_parse_rule(r) for r in config_dict.pop('rules', None) or []]
        config_dict.pop('config_dir', None)
        return AppConfig(
            flickr=flickr, cmd=cmd, upload=upload, rules=rules,
            config_dir=config_dir, **config_dict
        )
    except TypeError as e:
        raise ConfigError(f"Invalid configuration in {config_path}: {str(e)}")


def validate_for_upload(config: AppConfig) -> None:
    """
    Check that everything needed to upload is configured.

    Raises:
        ConfigError: If credentials or the exiftool path are missing
    """
    flickr = config.flickr
    if not (flickr.api_key and flickr.api_secret and flickr.oauth_token and flickr.oauth_secret):
        raise ConfigError("Unable to continue. Please run the 'authenticate' command first")
    if not config.cmd.exiftool:
        raise ConfigError("cmd.exiftool needs to be configured")


def save_config(config: AppConfig, config_path: str) -> None:
    """
    Save configuration to JSON file.

    Args:
        config: AppConfig object
        config_path: Path to save the configuration

    Raises:
        ConfigError: If the configuration cannot be saved
    """
    config_dict = asdict(config)

    # Per-run flags and derived values do not belong in the file
    for key in ('force', 'dry_run', 'config_dir'):
        config_dict.pop(key, None)

    try:
        config_dir = os.path.dirname(os.path.abspath(config_path))
        os.makedirs(config_dir, exist_ok=True)
        with open(config_path, 'w', encoding='utf-8') as f:
            json.dump(config_dict, f, indent=2)
    except (IOError, TypeError) as e:
        raise ConfigError(f"Failed to save configuration: {str(e)}")
