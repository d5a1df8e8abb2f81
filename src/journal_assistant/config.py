import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

REPO_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_PATH = REPO_ROOT / "config" / "default.yaml"

# env var -> config path
ENV_OVERRIDES = {
    "LLM_PROVIDER": ("llm", "provider"),
    "LLM_CHAT_MODEL": ("llm", "chat_model"),
    "JOURNAL_DEVICE_NAME": ("device", "name"),
    "JOURNAL_LOG_FILE": ("log_file",),
    "JOURNAL_LOG_LEVEL": ("log_level",),
    "PORT": ("port",),
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _read_yaml(path: Path) -> Dict[str, Any]:
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"config file {path} must contain a mapping")
    return data


def _set_path(cfg: Dict[str, Any], path, value: Any) -> None:
    node = cfg
    for key in path[:-1]:
        node = node.setdefault(key, {})
    node[path[-1]] = value


def load_config(path: Optional[str] = None, use_env: bool = True) -> Dict[str, Any]:
    """
    Load config/default.yaml, merge an optional override file over it, then
    apply environment overrides (after reading .env.local and .env).
    """
    cfg: Dict[str, Any] = {}
    if DEFAULT_CONFIG_PATH.exists():
        cfg = _read_yaml(DEFAULT_CONFIG_PATH)
    if path:
        cfg = _deep_merge(cfg, _read_yaml(Path(path)))
    if use_env:
        load_dotenv(".env.local", override=False)
        load_dotenv(".env", override=False)
        for env_name, cfg_path in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value:
                _set_path(cfg, cfg_path, int(value) if env_name == "PORT" else value)
        if os.getenv("USE_FAKE_LLM", "0").lower() in ("1", "true", "yes"):
            _set_path(cfg, ("llm", "provider"), "fake")
    return cfg


def max_tokens(cfg: Dict[str, Any], call: str, default: int) -> int:
    return int(cfg.get("llm", {}).get("max_tokens", {}).get(call, default))
