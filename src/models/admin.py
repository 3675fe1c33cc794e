# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Request and response models for administrator accounts."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.models.common import Permission, Role, UtcDateTime


class AdminCreateRequest(BaseModel):
    """Create an administrator account."""

    name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    school_name: str | None = Field(None, max_length=200)
    role: Role = Role.ADMIN

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class AdminResponse(BaseModel):
    """An administrator with the permissions granted at creation."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    school_name: str | None = None
    role: Role
    permissions: list[Permission]
    created_at: UtcDateTime
