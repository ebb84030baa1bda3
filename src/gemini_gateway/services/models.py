"""
Model names and aliases served by gemini-gateway.
"""

from __future__ import annotations

import time
from typing import Optional

from ..models import ModelInfo, ModelsResponse

MODEL_ALIASES = {
    "pro": "gemini-2.5-pro",
    "flash": "gemini-2.5-flash",
    "3-pro": "gemini-3-pro",
    "3-flash": "gemini-3-flash",
}

AVAILABLE_MODELS = [
    "gemini-2.5-pro",
    "gemini-2.5-flash",
    "gemini-2.0-flash",
    "gemini-2.0-flash-lite",
]


def resolve_model(model: Optional[str], default_model: str) -> str:
    """Pick the requested model (or the default) and expand short aliases."""
    name = model or default_model
    return MODEL_ALIASES.get(name, name)


def list_models() -> ModelsResponse:
    created = int(time.time())
    return ModelsResponse(data=[ModelInfo(id=model_id, created=created) for model_id in AVAILABLE_MODELS])
