"""
Utility functions for command-ext
"""
import os
import re
from typing import Any, Dict

import yaml

_ENV_REF_RE = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}')


def load_config(config_path: str = "recipe.yaml") -> Dict[str, Any]:
    """
    Load a recipe/config YAML file with environment variable substitution

    Supports ${VAR_NAME} syntax for environment variables
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        config_str = f.read()

    def replace_env(match):
        var_name = match.group(1)
        value = os.getenv(var_name)
        if value is None:
            raise ValueError(f"Environment variable {var_name} is not set")
        return value

    config_str = _ENV_REF_RE.sub(replace_env, config_str)

    config = yaml.safe_load(config_str)
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(f"Configuration root must be a mapping: {config_path}")
    return config
