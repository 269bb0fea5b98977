"""StyleGen app bootstrap."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping

from agents.design_orchestrator import FallbackOrchestrator, RetryPolicy
from logic.prompt_builder import build_prompt
from models.generation import GenerationResult
from models.preferences import PreferenceValidationError, build_preference_set
from stylegen_app.config import StyleGenConfig
from stylegen_app.logging_config import configure_logging, get_logger, log_event, operation_context
from tools.huggingface_provider import HuggingFaceImageProvider
from tools.image_provider import ConnectionStatus, GenerationOptions, ImageProvider
from tools.replicate_provider import ReplicateImageProvider


LOGGER = get_logger(__name__)


class UnknownProviderError(KeyError):
    """Raised when a caller names a provider the app does not know."""


class StyleGenApp:
    """Wires configuration, provider clients and the fallback orchestrator."""

    def __init__(
        self,
        config: StyleGenConfig | None = None,
        primary: ImageProvider | None = None,
        backup: ImageProvider | None = None,
    ) -> None:
        self.config = config or StyleGenConfig.from_env()
        configure_logging()

        self.primary = primary or HuggingFaceImageProvider(self.config.huggingface_settings())
        self.backup = backup or ReplicateImageProvider(self.config.replicate_settings())
        self.orchestrator = FallbackOrchestrator(
            primary=self.primary,
            backup=self.backup,
            retry_policy=RetryPolicy(
                attempts=self.config.retry_budget,
                backoff_seconds=dict(self.config.backoff_seconds),
            ),
            force_demo=self.config.demo_mode,
        )
        if not self.primary.configured and not self.backup.configured and not self.config.demo_mode:
            LOGGER.warning("No provider tokens configured; every design will be a placeholder")

    @property
    def providers(self) -> Dict[str, ImageProvider]:
        return {self.primary.name: self.primary, self.backup.name: self.backup}

    async def generate_design(
        self,
        raw_preferences: Mapping[str, Any],
        *,
        model_type: str | None = None,
        demo_mode: bool = False,
    ) -> GenerationResult:
        """Validate preferences and produce a design image.

        Raises:
            PreferenceValidationError: before any provider is contacted.
        """

        with operation_context("app:generate_design") as correlation_id:
            try:
                preferences = build_preference_set(raw_preferences)
            except PreferenceValidationError as exc:
                log_event(
                    LOGGER,
                    logging.WARNING,
                    "design_request_invalid",
                    details=exc.message,
                    correlation_id=correlation_id,
                )
                raise

            prompt = build_prompt(preferences)
            log_event(
                LOGGER,
                logging.INFO,
                "design_generation_started",
                style=preferences.style,
                occasion=preferences.occasion,
                model_type=model_type,
                demo_mode=demo_mode or self.config.demo_mode,
                correlation_id=correlation_id,
            )
            options = GenerationOptions(model_key=model_type) if model_type else None
            return await self.orchestrator.run(preferences, prompt, options=options, force_demo=demo_mode)

    def list_models(self) -> Dict[str, Any]:
        """Describe the models each provider can run."""

        models: List[Dict[str, str]] = []
        for label, provider in (("Hugging Face", self.primary), ("Replicate (Backup)", self.backup)):
            for model in provider.list_models():
                models.append(
                    {
                        "id": model.key,
                        "name": model.key.upper(),
                        "model_id": model.model_id,
                        "description": model.description,
                        "provider": label,
                    }
                )
        return {"models": models, "primary": self.primary.name, "backup": self.backup.name}

    async def test_provider(self, name: str) -> ConnectionStatus:
        provider = self.providers.get(name)
        if provider is None:
            raise UnknownProviderError(name)
        return await provider.test_connection()

    async def aclose(self) -> None:
        for provider in self.providers.values():
            await provider.aclose()


__all__ = ["StyleGenApp", "UnknownProviderError"]
