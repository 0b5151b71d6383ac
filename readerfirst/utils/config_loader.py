"""Configuration loading and management."""

import copy
import os
from pathlib import Path
from typing import Dict, Any, Optional

import yaml
from dotenv import load_dotenv

USER_CONFIG_PATH = Path.home() / ".readerfirst" / "config.yaml"


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Values from the file are layered over the defaults, then environment
    variables (including a local .env file) override both.

    Args:
        config_path: Path to config file (defaults to configs/default.yaml,
            then ~/.readerfirst/config.yaml)

    Returns:
        Configuration dictionary
    """
    load_dotenv()
    config = get_default_config()

    if config_path is None:
        possible_paths = [
            Path("configs/default.yaml"),
            Path(__file__).parent.parent.parent / "configs" / "default.yaml",
            USER_CONFIG_PATH,
        ]

        for path in possible_paths:
            if path.exists():
                config_path = str(path)
                break
        else:
            return override_with_env(config)

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        loaded = yaml.safe_load(f) or {}

    config = merge_config(config, loaded)
    return override_with_env(config)


def save_config(config: Dict[str, Any], config_path: str) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: Configuration dictionary
        config_path: Output path
    """
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w', encoding='utf-8') as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)


def merge_config(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def override_with_env(config: Dict[str, Any]) -> Dict[str, Any]:
    """Override config with environment variables."""
    env_mappings = {
        "OPENAI_API_KEY": ["api_keys", "openai"],
        "DEEPL_API_KEY": ["api_keys", "deepl"],
        "AI_MODEL": ["translation", "model"],
        "TRANSLATION_PROVIDER": ["translation", "provider"],
    }

    for env_var, path in env_mappings.items():
        value = os.getenv(env_var)
        if value:
            current = config
            for key in path[:-1]:
                if key not in current or current[key] is None:
                    current[key] = {}
                current = current[key]
            current[path[-1]] = value

    return config


def get_default_config() -> Dict[str, Any]:
    """Get default configuration."""
    return {
        "translation": {
            "provider": "openai",
            "model": "gpt-4o-mini",
            "target_lang": "pt-BR",
            "max_concurrency": 1,
            "openai_base_url": "https://api.openai.com/v1",
            "deepl_url": "https://api-free.deepl.com/v2/translate",
        },
        "retry": {
            "retries": 3,
            "base_delay": 0.5,
        },
        "http": {
            "timeout": 60.0,
        },
        "cache": {
            "directory": ".cache/readerfirst",
            "use_disk": True,
        },
        "enhancement": {
            "enabled": True,
            "max_takeaways": 6,
        },
        "logging": {
            "level": "INFO",
            "file": None,
        },
        "api_keys": {
            "openai": "",
            "deepl": "",
        },
    }
