"""Configuration helpers for the StyleGen design service."""

from dataclasses import dataclass, field
from pathlib import Path
import os
from typing import Dict, Optional

DEFAULT_HUGGINGFACE_URL = "https://api-inference.huggingface.co"
DEFAULT_REPLICATE_URL = "https://api.replicate.com"
DEFAULT_MODEL_KEY = "sdxl"


@dataclass(frozen=True)
class ProviderSettings:
    """Everything a single provider client needs, passed in at construction."""

    name: str
    base_url: str
    api_token: Optional[str] = None
    model_key: str = DEFAULT_MODEL_KEY
    request_timeout_seconds: float = 120.0
    connect_timeout_seconds: float = 10.0
    max_response_bytes: int = 50 * 1024 * 1024
    width: int = 1024
    height: int = 1024
    inference_steps: int = 20
    guidance_scale: float = 7.5
    poll_interval_seconds: float = 2.0
    poll_timeout_seconds: float = 90.0

    @property
    def configured(self) -> bool:
        return bool(self.api_token)


@dataclass
class StyleGenConfig:
    """Configuration values for the design generation service.

    Values come from environment variables, optionally layered on top of an
    environment file so that tokens can be injected by the runtime while the
    tuning knobs stay in version control.
    """

    huggingface_api_token: Optional[str] = None
    replicate_api_token: Optional[str] = None
    demo_mode: bool = False
    huggingface_model: str = DEFAULT_MODEL_KEY
    replicate_model: str = DEFAULT_MODEL_KEY
    huggingface_base_url: str = DEFAULT_HUGGINGFACE_URL
    replicate_base_url: str = DEFAULT_REPLICATE_URL
    retry_budget: int = 3
    request_timeout_seconds: float = 120.0
    connect_timeout_seconds: float = 10.0
    max_response_bytes: int = 50 * 1024 * 1024
    poll_interval_seconds: float = 2.0
    poll_timeout_seconds: float = 90.0
    backoff_seconds: Dict[str, float] = field(
        default_factory=lambda: {
            "model_loading": 10.0,
            "rate_limited": 5.0,
            "network": 2.0,
            "upstream": 2.0,
        }
    )
    image_width: int = 1024
    image_height: int = 1024
    inference_steps: int = 20
    guidance_scale: float = 7.5
    environment: str | None = None

    @classmethod
    def from_env(cls) -> "StyleGenConfig":
        """Build a config from environment variables or an environment YAML file.

        Environment specific YAML lives in ``config/environments/<env>.yaml`` by
        default. Environment variables always win over file values.
        """

        env_name = os.getenv("APP_ENV")
        config_path = os.getenv("APP_CONFIG_PATH")
        config_dir = Path(os.getenv("STYLEGEN_CONFIG_DIR", "config/environments"))
        yaml_config: dict = {}

        if config_path:
            path = Path(config_path)
        elif env_name:
            path = config_dir / f"{env_name}.yaml"
        else:
            path = None

        if path and path.exists():
            yaml_config = cls._load_yaml_config(path)

        def get_value(key: str, default: Optional[str] = None) -> Optional[str]:
            env_key = key.upper()
            return os.getenv(env_key, yaml_config.get(key, default))

        defaults = cls()
        backoff = dict(defaults.backoff_seconds)
        for reason in backoff:
            backoff[reason] = _as_float(get_value(f"backoff_{reason}_seconds"), backoff[reason])

        return cls(
            huggingface_api_token=get_value("huggingface_api_token") or None,
            replicate_api_token=get_value("replicate_api_token") or None,
            demo_mode=_as_bool(get_value("demo_mode"), defaults.demo_mode),
            huggingface_model=str(get_value("huggingface_model") or DEFAULT_MODEL_KEY),
            replicate_model=str(get_value("replicate_model") or DEFAULT_MODEL_KEY),
            huggingface_base_url=str(get_value("huggingface_base_url") or DEFAULT_HUGGINGFACE_URL),
            replicate_base_url=str(get_value("replicate_base_url") or DEFAULT_REPLICATE_URL),
            retry_budget=_as_int(get_value("retry_budget"), defaults.retry_budget),
            request_timeout_seconds=_as_float(
                get_value("request_timeout_seconds"), defaults.request_timeout_seconds
            ),
            connect_timeout_seconds=_as_float(
                get_value("connect_timeout_seconds"), defaults.connect_timeout_seconds
            ),
            max_response_bytes=_as_int(get_value("max_response_bytes"), defaults.max_response_bytes),
            poll_interval_seconds=_as_float(get_value("poll_interval_seconds"), defaults.poll_interval_seconds),
            poll_timeout_seconds=_as_float(get_value("poll_timeout_seconds"), defaults.poll_timeout_seconds),
            backoff_seconds=backoff,
            image_width=_as_int(get_value("image_width"), defaults.image_width),
            image_height=_as_int(get_value("image_height"), defaults.image_height),
            inference_steps=_as_int(get_value("inference_steps"), defaults.inference_steps),
            guidance_scale=_as_float(get_value("guidance_scale"), defaults.guidance_scale),
            environment=env_name,
        )

    def huggingface_settings(self) -> ProviderSettings:
        return self._provider_settings(
            "huggingface", self.huggingface_base_url, self.huggingface_api_token, self.huggingface_model
        )

    def replicate_settings(self) -> ProviderSettings:
        return self._provider_settings(
            "replicate", self.replicate_base_url, self.replicate_api_token, self.replicate_model
        )

    def _provider_settings(
        self, name: str, base_url: str, token: Optional[str], model_key: str
    ) -> ProviderSettings:
        return ProviderSettings(
            name=name,
            base_url=base_url.rstrip("/"),
            api_token=token,
            model_key=model_key,
            request_timeout_seconds=self.request_timeout_seconds,
            connect_timeout_seconds=self.connect_timeout_seconds,
            max_response_bytes=self.max_response_bytes,
            width=self.image_width,
            height=self.image_height,
            inference_steps=self.inference_steps,
            guidance_scale=self.guidance_scale,
            poll_interval_seconds=self.poll_interval_seconds,
            poll_timeout_seconds=self.poll_timeout_seconds,
        )

    @staticmethod
    def _load_yaml_config(path: Path) -> dict:
        """Parse a minimal YAML/INI-style config without external dependencies."""

        config: dict[str, str] = {}
        for line in path.read_text().splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            value = raw_value.strip()
            if (value.startswith("\"") and value.endswith("\"")) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]
            config[key.strip()] = value
        return config


def _as_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def _as_int(value: Optional[str], default: int) -> int:
    if value is None or value == "":
        return default
    return int(value)


def _as_float(value: Optional[str], default: float) -> float:
    if value is None or value == "":
        return default
    return float(value)


__all__ = ["ProviderSettings", "StyleGenConfig"]
