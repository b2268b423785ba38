"""
Pydantic models for the YAML system file.

A system file has four optional sections:
  accounts        name, value, growth_rate | share_price + num_shares + strike_price, updates
  account_groups  name + ordered account names
  trajectories    name + account_group + optional start_date / stop_date
  plots           file_name + trajectory + optional account_names / account_sums
Names are checked for existence later, by the builder, once everything is parsed.
"""

from __future__ import annotations

import datetime as dt
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from core.schema import RESERVED_ACCOUNT_NAMES, Recurrence


def as_name(value: Any) -> Any:
    """YAML turns unquoted names like 401k or 2024 into numbers; keep them as text."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, list):
        return [as_name(v) for v in value]
    return value


def duplicates(names: List[str]) -> List[str]:
    return sorted({n for n in names if names.count(n) > 1})


class SpecModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class UpdateSpec(SpecModel):
    """One scheduled change on an account."""
    value_change: float
    recurrence: Recurrence
    day: Optional[Union[int, dt.date, str]] = Field(
        None, description="Weekday name, day-of-month/day-of-year, or a date for 'once'."
    )
    transfer_to: Optional[str] = Field(None, description="Account credited with the opposite amount.")

    @field_validator("transfer_to", mode="before")
    @classmethod
    def coerce_target(cls, v: Any) -> Any:
        return as_name(v)

    @model_validator(mode="after")
    def day_required(self) -> "UpdateSpec":
        if self.recurrence != "daily" and self.day is None:
            raise ValueError(f'"day" is required when recurrence is "{self.recurrence}"')
        return self


class AccountSpec(SpecModel):
    name: str
    value: float = 0.0
    growth_rate: Optional[float] = None
    share_price: Optional[str] = Field(None, description="Account whose value this one tracks.")
    num_shares: Optional[float] = None
    strike_price: float = 0.0
    updates: List[UpdateSpec] = Field(default_factory=list)

    @field_validator("name", "share_price", mode="before")
    @classmethod
    def coerce_names(cls, v: Any) -> Any:
        return as_name(v)

    @field_validator("name")
    @classmethod
    def not_reserved(cls, v: str) -> str:
        if v in RESERVED_ACCOUNT_NAMES:
            raise ValueError(f"account name {v!r} is reserved")
        return v

    @field_validator("updates", mode="before")
    @classmethod
    def none_is_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @model_validator(mode="after")
    def share_price_fields(self) -> "AccountSpec":
        if self.share_price is not None:
            if self.growth_rate:
                raise ValueError("growth_rate cannot be combined with share_price")
            if self.num_shares is None:
                raise ValueError("num_shares is required with share_price")
        elif self.num_shares is not None:
            raise ValueError("num_shares is only valid with share_price")
        return self


class AccountGroupSpec(SpecModel):
    name: str
    accounts: List[str] = Field(default_factory=list)

    @field_validator("name", "accounts", mode="before")
    @classmethod
    def coerce_names(cls, v: Any) -> Any:
        return as_name(v)


class TrajectorySpec(SpecModel):
    name: str
    account_group: str
    start_date: Optional[dt.date] = None
    stop_date: Optional[dt.date] = None

    @field_validator("name", "account_group", mode="before")
    @classmethod
    def coerce_names(cls, v: Any) -> Any:
        return as_name(v)


class AccountSumSpec(SpecModel):
    sum_name: str
    account_names: List[str]

    @field_validator("sum_name", "account_names", mode="before")
    @classmethod
    def coerce_names(cls, v: Any) -> Any:
        return as_name(v)


class PlotSpec(SpecModel):
    file_name: str
    trajectory: str
    account_names: List[str] = Field(default_factory=list)
    account_sums: List[AccountSumSpec] = Field(default_factory=list)

    @field_validator("trajectory", "account_names", mode="before")
    @classmethod
    def coerce_names(cls, v: Any) -> Any:
        return as_name(v)


class SystemSpec(SpecModel):
    accounts: List[AccountSpec] = Field(default_factory=list)
    account_groups: List[AccountGroupSpec] = Field(default_factory=list)
    trajectories: List[TrajectorySpec] = Field(default_factory=list)
    plots: List[PlotSpec] = Field(default_factory=list)

    @field_validator("accounts", "account_groups", "trajectories", "plots", mode="before")
    @classmethod
    def none_is_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @model_validator(mode="after")
    def unique_names(self) -> "SystemSpec":
        for section, items in (
            ("accounts", self.accounts),
            ("account_groups", self.account_groups),
            ("trajectories", self.trajectories),
        ):
            dupes = duplicates([i.name for i in items])
            if dupes:
                raise ValueError(f"duplicate names in {section}: {dupes}")
        return self
