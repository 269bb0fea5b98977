"""Hugging Face Inference API client, the primary image provider."""

from __future__ import annotations

import logging

from models.generation import RawImageResponse
from tools.image_provider import GenerationOptions, ImageProvider, ModelInfo

LOGGER = logging.getLogger(__name__)

HUGGINGFACE_MODELS = {
    "sdxl": ModelInfo(
        key="sdxl",
        model_id="stabilityai/stable-diffusion-xl-base-1.0",
        description="Stable Diffusion XL - High quality, detailed fashion designs",
    ),
    "sd21": ModelInfo(
        key="sd21",
        model_id="stabilityai/stable-diffusion-2-1",
        description="Stable Diffusion 2.1 - Fast, reliable fashion generation",
    ),
    "flux": ModelInfo(
        key="flux",
        model_id="black-forest-labs/FLUX.1-schnell",
        description="FLUX Schnell - Artistic and creative fashion designs",
    ),
    "realistic": ModelInfo(
        key="realistic",
        model_id="SG161222/Realistic_Vision_V4.0",
        description="Realistic Vision - Photorealistic fashion designs",
    ),
}


class HuggingFaceImageProvider(ImageProvider):
    """Posts prompts to ``/models/<model>`` and receives raw image bytes back."""

    name = "huggingface"
    catalog = HUGGINGFACE_MODELS

    async def _generate(self, prompt: str, options: GenerationOptions) -> RawImageResponse:
        model = self.resolve_model(options.model_key)
        url = f"{self.settings.base_url}/models/{model.model_id}"
        payload = {
            "inputs": prompt,
            "parameters": {
                "num_inference_steps": options.inference_steps,
                "guidance_scale": options.guidance_scale,
                "width": options.width,
                "height": options.height,
            },
        }
        headers = {
            "Authorization": f"Bearer {self.settings.api_token}",
            "Content-Type": "application/json",
            "User-Agent": "StyleGenAI/1.0",
        }
        LOGGER.debug("Requesting Hugging Face image", extra={"model_id": model.model_id})
        async with self.client.stream("POST", url, json=payload, headers=headers) as response:
            return await self._read_image(response, model.model_id)


__all__ = ["HUGGINGFACE_MODELS", "HuggingFaceImageProvider"]
