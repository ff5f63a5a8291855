from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

# Feed tokens are whitespace-delimited, so no field may contain whitespace.
_TOKEN = r"^\S+$"


class VanityRecord(BaseModel):
    """Routing metadata for one vanity package."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, pattern=_TOKEN)
    vcs: str = Field(min_length=1, pattern=_TOKEN)  # "git" | "hg" | ... (not checked)
    repo_url: str = Field(min_length=1, pattern=_TOKEN)

    @property
    def meta_content(self) -> str:
        """Value of the ``go-import`` meta tag."""
        return f"{self.name} {self.vcs} {self.repo_url}"
