"""
Quota models for gemini-gateway.

Raw ``retrieveUserQuota`` buckets and the per-model summary returned by
the ``/quota`` endpoint.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class QuotaBucket(BaseModel):
    """One quota measurement as reported by the backend."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, protected_namespaces=(), extra="ignore"
    )

    model_id: Optional[str] = None
    remaining_fraction: Optional[float] = None
    reset_time: Optional[str] = None
    token_type: Optional[str] = None


class QuotaInfo(BaseModel):
    """Remaining quota of one model."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, protected_namespaces=())

    model_id: str = Field(..., description="Model identifier")
    percent_left: int = Field(..., description="Remaining quota in percent", ge=0, le=100)
    reset_time: Optional[str] = Field(None, description="ISO timestamp of the next reset")
    reset_description: str = Field(..., description="Human readable time until reset")


class QuotaResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, protected_namespaces=())

    quotas: List[QuotaInfo] = Field(default_factory=list)
