"""Profile Schemas — profile read and update payloads."""

from pydantic import BaseModel, Field, field_validator, model_validator

from app.schemas.auth import UserProfile, check_password_strength


class ProfileUpdate(BaseModel):
    """Profile update: name and/or password change, validated together."""
    name: str | None = Field(None, min_length=2, max_length=80)
    current_password: str | None = Field(None, min_length=8, max_length=128)
    new_password: str | None = Field(None, min_length=8, max_length=128)
    confirm_password: str | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be 2-80 chars")
        return v

    @field_validator("new_password")
    @classmethod
    def strong_password(cls, v: str | None) -> str | None:
        return v if v is None else check_password_strength(v)

    @model_validator(mode="after")
    def confirm_matches(self):
        if (
            self.new_password
            and self.confirm_password is not None
            and self.confirm_password != self.new_password
        ):
            raise ValueError("confirm_password must match new_password")
        return self


class ProfileResponse(BaseModel):
    user: UserProfile
