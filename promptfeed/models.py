from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class SourceDescriptor(BaseModel):
    """Where a document comes from and what its records default to."""

    model_config = ConfigDict(frozen=True)

    name: str
    url: str
    default_attribution: str = ""
    mode: str = "edit"
    category: str = "生活"
    sub_category: str = ""

    @property
    def origin_link(self) -> str:
        # raw.githubusercontent.com/<owner>/<repo>/refs/heads/<branch>/<path>
        # -> github.com/<owner>/<repo>/blob/<branch>/<path>
        return self.url.replace("raw.githubusercontent.com", "github.com").replace("/refs/heads", "/blob")

    @property
    def base_url(self) -> str:
        return self.url[: self.url.rfind("/")] if "/" in self.url else self.url


class Record(BaseModel):
    """One prompt entry. Older collections used prompt/author/link/sub_category."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = ""
    preview: str = ""
    body: str = Field(
        default="",
        validation_alias=AliasChoices("body", "prompt"),
        serialization_alias="body",
    )
    attribution: str = Field(
        default="",
        validation_alias=AliasChoices("attribution", "author"),
        serialization_alias="attribution",
    )
    origin_link: str = Field(
        default="",
        validation_alias=AliasChoices("originLink", "origin_link", "link"),
        serialization_alias="originLink",
    )
    mode: str = ""
    category: str = ""
    sub_category: str = Field(
        default="",
        validation_alias=AliasChoices("subCategory", "sub_category"),
        serialization_alias="subCategory",
    )

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_text(cls, v):
        if v is None:
            return ""
        # hand-edited collections carry numbers and booleans in text fields
        if isinstance(v, (int, float, bool)):
            return str(v)
        return v

    @property
    def is_valid(self) -> bool:
        return bool(self.title) and bool(self.body or self.preview)
