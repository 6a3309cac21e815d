from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .llm import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODELS,
    DEFAULT_PROVIDER,
    DEFAULT_TEMPERATURE,
    ClientConfig,
    mask_secret,
)


logger = logging.getLogger(__name__)

DEFAULT_DIR = Path(os.path.expanduser("~/.promptline"))
DEFAULT_FILE = DEFAULT_DIR / "config.json"

KNOWN_KEYS = ("provider", "model", "temperature", "max-tokens", "api-key")

# Provider SDKs' conventional variables, checked after PL_API_KEY
PROVIDER_KEY_ENVS = {
    "openai": ("OPENAI_API_KEY",),
    "gemini": ("GOOGLE_API_KEY", "GEMINI_API_KEY"),
}


def _default_path() -> Path:
    override = os.environ.get("PROMPTLINE_CONFIG", "").strip()
    return Path(override) if override else DEFAULT_FILE


@dataclass
class ConfigManager:
    path: Path = field(default_factory=_default_path)

    def _ensure_dir(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Ignoring unreadable config file: %s", self.path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring config file without a JSON object: %s", self.path)
            return {}
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        self._ensure_dir()
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        tmp.replace(self.path)

    def set(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def get(self, key: str) -> Optional[Any]:
        # ENV first
        env_key = self._env_key(key)
        if env_key in os.environ:
            return os.environ[env_key]
        return self._read().get(key)

    def all(self) -> Dict[str, Any]:
        data = self._read()
        for k in KNOWN_KEYS:
            env_key = self._env_key(k)
            if env_key in os.environ:
                data[k] = os.environ[env_key]
        return data

    @staticmethod
    def _env_key(key: str) -> str:
        # api-key -> PL_API_KEY
        up = key.upper().replace("-", "_")
        return f"PL_{up}"

    mask = staticmethod(mask_secret)

    def unset(self, key: str) -> bool:
        data = self._read()
        existed = key in data
        if existed:
            del data[key]
            self._write(data)
        return existed


def _resolve_api_key(cm: ConfigManager, provider: str, use_stored: bool = True) -> Optional[str]:
    value = cm.get("api-key") if use_stored else None
    if value and str(value).strip():
        return str(value).strip()
    for env in PROVIDER_KEY_ENVS.get(provider, ()):
        if os.environ.get(env, "").strip():
            return os.environ[env].strip()
    return None


def resolve_client_config(
    cm: Optional[ConfigManager] = None,
    *,
    provider: Optional[str] = None,
    model: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    api_key: Optional[str] = None,
) -> ClientConfig:
    """Build a :class:`ClientConfig` from explicit values, env and the config file.

    Priority: keyword arguments, then ``PL_*`` env vars, then the config
    file, then the provider's own key variable (API key only), then defaults.
    The stored ``model`` and ``api-key`` are skipped when ``provider`` names a
    backend other than the configured one.
    Raises ``ValueError`` when no API key is found or a value is invalid.
    """
    cm = cm or ConfigManager()

    configured = str(cm.get("provider") or DEFAULT_PROVIDER).strip().lower()
    provider = str(provider).strip().lower() if provider else configured
    if provider not in DEFAULT_MODELS:
        raise ValueError(f"Unknown provider: {provider} (expected one of: {', '.join(sorted(DEFAULT_MODELS))})")
    # stored model and api-key belong to the configured provider
    same_provider = provider == configured

    model = model or (cm.get("model") if same_provider else None) or DEFAULT_MODELS[provider]

    if temperature is None:
        raw = cm.get("temperature")
        try:
            temperature = float(raw) if raw is not None else DEFAULT_TEMPERATURE
        except (TypeError, ValueError):
            raise ValueError(f"temperature must be a number, got {raw!r}")

    if max_tokens is None:
        raw = cm.get("max-tokens")
        try:
            max_tokens = int(raw) if raw is not None else DEFAULT_MAX_TOKENS
        except (TypeError, ValueError):
            raise ValueError(f"max-tokens must be an integer, got {raw!r}")

    api_key = api_key or _resolve_api_key(cm, provider, use_stored=same_provider)
    if not api_key:
        stored = ("PL_API_KEY",) if same_provider else ()
        envs = " or ".join(stored + PROVIDER_KEY_ENVS[provider])
        raise ValueError(
            f"An API key is required for provider '{provider}'. Set {envs}, "
            "or run: promptline config set --key api-key --value YOUR_KEY"
        )

    config = ClientConfig(
        api_key=api_key,
        model=str(model).strip(),
        temperature=temperature,
        max_tokens=max_tokens,
        provider=provider,
    )
    logger.debug("Resolved %r", config)
    return config
