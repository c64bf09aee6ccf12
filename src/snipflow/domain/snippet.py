"""Domain model for snippet definitions.

Definitions arrive from JSON snippet files; pydantic keeps their shape
consistent regardless of which source produced them.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Snippet(BaseModel):
    """A single snippet definition bound to one trigger prefix."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., description="Key of the snippet in its definition file")
    prefix: str = Field(..., min_length=1, description="Trigger prefix typed before the cursor")
    body: str = Field(..., description="Snippet body handed to the expansion engine")
    description: str = Field("", description="Human readable description shown in pickers")
    filetype: str = Field("all", description="Filetype the snippet belongs to")
    auto_trigger: bool = Field(False, alias="autotrigger", description="Expand without explicit action")
    source: str = Field("snippets", description="Name of the source that loaded it")

    @field_validator("body", mode="before")
    @classmethod
    def _join_body(cls, value: object) -> object:
        if isinstance(value, list):
            return "\n".join(str(line) for line in value)
        return value

    @property
    def label(self) -> str:
        """Description used by pickers; falls back to ``prefix: name``."""
        return self.description or f"{self.prefix}: {self.name}"


class SnippetFileEntry(BaseModel):
    """One entry of a VSCode style ``<filetype>.json`` snippet file."""

    model_config = ConfigDict(populate_by_name=True)

    prefix: str | list[str]
    body: str | list[str]
    description: str = ""
    auto_trigger: bool = Field(False, alias="autotrigger")

    def prefixes(self) -> list[str]:
        if isinstance(self.prefix, str):
            return [self.prefix]
        return [p for p in self.prefix if p]
