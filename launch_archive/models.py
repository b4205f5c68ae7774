"""
models.py
---------
Canonical Launch / Rocket records shared by every source.
Both upstream shapes are normalized into these before they are merged or persisted.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Patch(BaseModel):
    small: Optional[str] = None
    large: Optional[str] = None


class Flickr(BaseModel):
    small: List[str] = Field(default_factory=list)
    original: List[str] = Field(default_factory=list)


class LaunchLinks(BaseModel):
    patch: Patch = Field(default_factory=Patch)
    flickr: Flickr = Field(default_factory=Flickr)
    webcast: Optional[str] = None
    wikipedia: Optional[str] = None
    article: Optional[str] = None


class Launch(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1)
    name: str
    date_utc: str
    success: Optional[bool] = None   # None = in progress / unclassified
    upcoming: bool = False
    rocket: str
    details: Optional[str] = None
    links: LaunchLinks = Field(default_factory=LaunchLinks)

    def with_wikipedia(self, url: str) -> "Launch":
        links = self.links.model_copy(update={"wikipedia": url})
        return self.model_copy(update={"links": links})


class Rocket(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1)
    name: str
    type: str = "Unknown"
    active: bool = False
    first_flight: str = "Unknown"
