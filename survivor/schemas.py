"""
Request and response records for the JSON API

Payloads arrive in camelCase from the web client; snake_case is accepted too.
Each record validates its fields once, at the boundary, so services can trust
their inputs.
"""

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class RequestModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    @classmethod
    def from_json(cls, payload):
        """Validate a decoded JSON body (None is treated as an empty object)"""
        return cls.model_validate(payload or {})


class RegisterRequest(RequestModel):
    email: str = Field(min_length=3, max_length=120)
    password: str = Field(min_length=6, max_length=128)
    name: str = Field(min_length=1, max_length=100)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value):
        if "@" not in value:
            raise ValueError("must be an email address")
        return value.lower()


class LoginRequest(RequestModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value):
        return value.lower()


class SubmitPickRequest(RequestModel):
    team_id: int = Field(gt=0)
    matchweek_id: int = Field(gt=0)


class FinalizeMatchRequest(RequestModel):
    match_id: int = Field(gt=0)
    home_score: int = Field(ge=0, strict=True)
    away_score: int = Field(ge=0, strict=True)


class MatchEntry(RequestModel):
    home_team_id: int = Field(gt=0)
    away_team_id: int = Field(gt=0)
    match_date: Optional[datetime] = None

    @model_validator(mode="after")
    def teams_differ(self):
        if self.home_team_id == self.away_team_id:
            raise ValueError("home and away teams must be different")
        return self


class BulkMatchesRequest(RequestModel):
    matchweek_id: int = Field(gt=0)
    matches: List[MatchEntry]

    @model_validator(mode="after")
    def teams_play_once(self):
        seen = set()
        for entry in self.matches:
            for team_id in (entry.home_team_id, entry.away_team_id):
                if team_id in seen:
                    raise ValueError(f"team {team_id} appears in more than one match")
                seen.add(team_id)
        return self


class ToggleMatchesRequest(RequestModel):
    match_ids: List[int] = Field(min_length=1)
    is_active: bool


class MatchweekActivationRequest(RequestModel):
    matchweek_id: int = Field(gt=0)
    is_active: bool


class CreateMatchweekRequest(RequestModel):
    week_number: int = Field(gt=0)
    name: Optional[str] = Field(default=None, max_length=100)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class PickOutcome(BaseModel):
    outcome: Literal["created", "updated"]
    pick_id: int
    team_id: int
    match_id: int

    @property
    def created(self):
        return self.outcome == "created"


class FinalizeResult(BaseModel):
    match_id: int
    eliminated_count: int
    processed_count: int


class UserStanding(BaseModel):
    id: int
    name: str
    email: str
    is_eliminated: bool
    total_selections: int
    correct_selections: int
    losses: int
    points: int
    last_week_survived: int
    selections: Optional[List[dict]] = None

    def to_dict(self):
        return self.model_dump(exclude_none=True)
