"""Replicate predictions API client, the backup image provider.

Replicate answers a prediction request with a handle that must be polled until
it reaches a terminal status. Polling runs every ``poll_interval_seconds`` and
gives up after ``poll_timeout_seconds``; the first output URL is then
downloaded under the same response size cap as any other provider body.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict

from models.generation import RawImageResponse
from tools.image_provider import (
    NETWORK,
    FatalProviderError,
    GenerationOptions,
    ImageProvider,
    ModelInfo,
    RetryableProviderError,
    error_for_status,
)

LOGGER = logging.getLogger(__name__)

REPLICATE_MODELS = {
    "sdxl": ModelInfo(
        key="sdxl",
        model_id="stability-ai/sdxl:39ed52f2a78e934b3ba6e2a89f5b1c712de7dfea535525255b1aa35c5565e08b",
        description="Stable Diffusion XL - High quality, detailed fashion designs",
    ),
    "sd15": ModelInfo(
        key="sd15",
        model_id="stability-ai/stable-diffusion:db21e45d3f7023abc2a46ee38a23973f6dce16bb082a930b0c49861f96d1e5bf",
        description="Stable Diffusion 1.5 - Fast, reliable fashion generation",
    ),
    "flux": ModelInfo(
        key="flux",
        model_id="black-forest-labs/flux-schnell:bf2f2e683d03a9549f484a37a0df1581e0b0b3b2c7d15028b982f5532dfb9e56",
        description="FLUX Schnell - Artistic and creative fashion designs",
    ),
    "playground": ModelInfo(
        key="playground",
        model_id=(
            "playgroundai/playground-v2.5-1024px-aesthetic:"
            "a45f82a1382bed5c7aeb861dac7c7d191b0fdf74d8d57c4a0e6ed7d4d0bf7d24"
        ),
        description="Playground v2.5 - Creative and aesthetic designs",
    ),
}

TERMINAL_STATUSES = {"succeeded", "failed", "canceled"}


class ReplicateImageProvider(ImageProvider):
    """Creates a prediction, polls it to completion and fetches the output image."""

    name = "replicate"
    catalog = REPLICATE_MODELS

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Token {self.settings.api_token}",
            "Content-Type": "application/json",
        }

    async def _generate(self, prompt: str, options: GenerationOptions) -> RawImageResponse:
        model = self.resolve_model(options.model_key)
        payload = {
            "version": model.model_id.split(":")[-1],
            "input": {
                "prompt": prompt,
                "width": options.width,
                "height": options.height,
                "num_inference_steps": options.inference_steps,
                "guidance_scale": options.guidance_scale,
            },
        }
        prediction = await self._prediction_request(
            "POST", f"{self.settings.base_url}/v1/predictions", json=payload
        )
        LOGGER.info(
            "Replicate prediction submitted",
            extra={"prediction_id": prediction.get("id"), "prediction_status": prediction.get("status")},
        )

        prediction = await self._poll(prediction)
        status = prediction.get("status")
        if status != "succeeded":
            raise FatalProviderError(
                self.name,
                f"prediction {status}: {prediction.get('error') or 'no error detail'}",
                reason=f"prediction_{status}",
            )
        return await self._download(self._first_output(prediction), model.model_id)

    async def _poll(self, prediction: Dict[str, Any]) -> Dict[str, Any]:
        poll_url = (prediction.get("urls") or {}).get("get")
        if not poll_url:
            prediction_id = prediction.get("id")
            if not prediction_id:
                raise FatalProviderError(self.name, "prediction handle missing id", reason="malformed_response")
            poll_url = f"{self.settings.base_url}/v1/predictions/{prediction_id}"

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.settings.poll_timeout_seconds
        while prediction.get("status") not in TERMINAL_STATUSES:
            if loop.time() >= deadline:
                raise RetryableProviderError(
                    self.name,
                    f"prediction still '{prediction.get('status')}' after {self.settings.poll_timeout_seconds}s",
                    reason=NETWORK,
                )
            await asyncio.sleep(self.settings.poll_interval_seconds)
            prediction = await self._prediction_request("GET", poll_url)
        return prediction

    async def _prediction_request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        """Send a predictions API call and decode its JSON body under the size cap."""

        async with self.client.stream(method, url, headers=self._headers(), **kwargs) as response:
            body = await self._read_capped(response)
        status = response.status_code
        if not 200 <= status < 300:
            raise error_for_status(self.name, status, body.decode("utf-8", "replace"))
        try:
            data = json.loads(body)
        except ValueError as exc:
            raise FatalProviderError(self.name, "prediction response was not JSON", status, "malformed_response") from exc
        if not isinstance(data, dict):
            raise FatalProviderError(
                self.name, "prediction response was not an object", status, "malformed_response"
            )
        return data

    def _first_output(self, prediction: Dict[str, Any]) -> str:
        output = prediction.get("output")
        if isinstance(output, list):
            output = output[0] if output else None
        if not isinstance(output, str) or not output:
            raise FatalProviderError(self.name, "prediction succeeded without an output URL", reason="malformed_response")
        return output

    async def _download(self, url: str, model_id: str) -> RawImageResponse:
        async with self.client.stream("GET", url) as response:
            return await self._read_image(response, model_id)


__all__ = ["REPLICATE_MODELS", "ReplicateImageProvider", "TERMINAL_STATUSES"]
