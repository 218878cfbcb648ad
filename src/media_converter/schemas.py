"""Pydantic models for artifacts moving through the workflow."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from media_converter.types import TargetFormat


class PickedFile(BaseModel):
    """Raw picker result, as reported by the platform dialog."""

    model_config = ConfigDict(extra="ignore")

    uri: str
    name: str
    mime_type: str | None = None
    size: int | None = Field(default=None, ge=0)

    @field_validator("uri", "name")
    @classmethod
    def _validate_non_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("picker returned an empty uri/name.")
        return value


def _extension_of(name: str) -> str:
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


class SourceArtifact(BaseModel):
    """Currently selected file. Replaced wholesale on every selection."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    locator: str
    display_name: str
    media_kind: str = ""
    size_bytes: int = Field(default=0, ge=0)
    extension: str = ""

    @classmethod
    def from_picked(cls, picked: PickedFile) -> SourceArtifact:
        """Build a source artifact from a picker result."""
        return cls(
            locator=picked.uri,
            display_name=picked.name,
            media_kind=picked.mime_type or "",
            size_bytes=picked.size or 0,
            extension=_extension_of(picked.name),
        )

    @property
    def is_image(self) -> bool:
        """Whether the MIME type names an image."""
        return "image" in self.media_kind

    @property
    def kind_label(self) -> str:
        """Upper-cased MIME subtype, e.g. ``HEIC`` for ``image/heic``."""
        _, _, subtype = self.media_kind.partition("/")
        return subtype.upper() if subtype else "UNKNOWN"

    @property
    def size_megabytes(self) -> str:
        return f"{self.size_bytes / 1024 / 1024:.2f}"


class ConvertedArtifact(BaseModel):
    """Output of a successful conversion run."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    locator: str
    display_name: str
    target_format: TargetFormat
    source_display_name: str
