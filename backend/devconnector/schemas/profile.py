"""
DevConnector Backend - Profile Request/Response Schemas
========================================================

What:  API contract for /api/profile.
How:   Request models declare every field optional. Required-field checks
       happen in ProfileService so that a missing field yields the
       structured 400 error list and so `status`/`skills` can be required
       only when a profile is first created.

Sparse patches:
    ProfileUpsert is consumed with `model_dump(exclude_unset=True)`. A key the
    client did not send is not in the dump and leaves the stored value alone;
    a key sent as null clears the stored value.
"""

import uuid
from datetime import date, datetime
from typing import ClassVar, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


SOCIAL_FIELDS = ("youtube", "facebook", "twitter", "instagram", "linkedin")


class RequiredFieldsMixin:
    """Reports which of REQUIRED ({attribute: label}) are missing or blank."""

    REQUIRED: ClassVar[Dict[str, str]] = {}

    def missing_required(self) -> Dict[str, str]:
        """Returns {wire name: label} for every required field that is absent or empty."""
        missing = {}
        for attr, label in self.REQUIRED.items():
            value = getattr(self, attr)
            if value is None or (isinstance(value, (str, list)) and not value):
                alias = type(self).model_fields[attr].alias
                missing[alias or attr] = label
        return missing


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class ProfileUpsert(RequiredFieldsMixin, BaseModel):
    """
    Body of POST /api/profile.

    `skills` is normally a comma-delimited string ("html, css,js"); a JSON
    list is accepted as well. Social links are sent top-level and stored in
    the nested `social` object.
    """

    REQUIRED: ClassVar[Dict[str, str]] = {"status": "Status", "skills": "Skills"}

    company: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    status: Optional[str] = None
    githubusername: Optional[str] = None
    skills: Optional[Union[str, List[str]]] = None

    youtube: Optional[str] = None
    facebook: Optional[str] = None
    twitter: Optional[str] = None
    instagram: Optional[str] = None
    linkedin: Optional[str] = None


class ExperienceCreate(RequiredFieldsMixin, BaseModel):
    """Body of PUT /api/profile/experience."""

    REQUIRED: ClassVar[Dict[str, str]] = {
        "title": "Title",
        "company": "Company",
        "from_": "From date",
    }

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    from_: Optional[date] = Field(default=None, alias="from")
    to: Optional[date] = None
    current: Optional[bool] = False
    description: Optional[str] = None

    @field_validator("current", mode="before")
    @classmethod
    def null_current_is_false(cls, v):
        return False if v is None else v


class EducationCreate(RequiredFieldsMixin, BaseModel):
    """Body of PUT /api/profile/education."""

    REQUIRED: ClassVar[Dict[str, str]] = {
        "school": "School",
        "degree": "Degree",
        "fieldofstudy": "Field of study",
        "from_": "From date",
    }

    model_config = ConfigDict(populate_by_name=True)

    school: Optional[str] = None
    degree: Optional[str] = None
    fieldofstudy: Optional[str] = None
    from_: Optional[date] = Field(default=None, alias="from")
    to: Optional[date] = None
    current: Optional[bool] = False
    description: Optional[str] = None

    @field_validator("current", mode="before")
    @classmethod
    def null_current_is_false(cls, v):
        return False if v is None else v


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class UserSummary(BaseModel):
    """The owner's public identity joined into every profile."""
    id: uuid.UUID
    name: str
    avatar: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class SocialLinks(BaseModel):
    youtube: Optional[str] = None
    facebook: Optional[str] = None
    twitter: Optional[str] = None
    instagram: Optional[str] = None
    linkedin: Optional[str] = None


class ExperienceItem(BaseModel):
    """A stored experience entry."""
    id: str
    title: str
    company: str
    location: Optional[str] = None
    from_: date = Field(alias="from")
    to: Optional[date] = None
    current: bool = False
    description: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class EducationItem(BaseModel):
    """A stored education entry."""
    id: str
    school: str
    degree: str
    fieldofstudy: str
    from_: date = Field(alias="from")
    to: Optional[date] = None
    current: bool = False
    description: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class ProfileResponse(BaseModel):
    """
    Full profile as returned by every /api/profile endpoint.

    `user` is the joined owner summary, not a bare id.
    """
    id: uuid.UUID
    user: UserSummary
    company: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    status: str
    githubusername: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    social: SocialLinks = Field(default_factory=SocialLinks)
    experience: List[ExperienceItem] = Field(default_factory=list)
    education: List[EducationItem] = Field(default_factory=list)
    date: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
