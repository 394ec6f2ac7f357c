# Copyright (c) Syntropy Systems
"""Shared Pydantic model helpers for diskspeed."""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, ConfigDict


class FrozenModel(BaseModel):
    """Immutable model for snapshots handed across threads."""

    model_config: ClassVar[ConfigDict] = ConfigDict(
        extra="forbid",
        frozen=True,
    )
