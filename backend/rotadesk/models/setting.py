from __future__ import annotations

from sqlmodel import Field

from rotadesk.models.base import UpdatedAtMixin


class AppSetting(UpdatedAtMixin, table=True):
    """Runtime-editable key/value configuration."""

    __tablename__ = "app_setting"

    key: str = Field(primary_key=True, max_length=100)
    value: str = Field(max_length=500)
