"""Shared pydantic configuration for exchange wire models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """
    Immutable model decoded from exchange JSON.

    Unknown keys are dropped: the exchange adds fields without notice and
    documents some as "ignore".
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class CamelModel(WireModel):
    """Wire model whose keys are the camelCase form of the field names."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )
