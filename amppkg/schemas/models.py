# amppkg/schemas/models.py

from __future__ import annotations

from enum import IntEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# =========================
# Subresources
# =========================

# Resource kind decides the cache path prefix and whether width hints apply.
SubresourceKind = Literal["image", "other"]

# Request destinations allowed in preload hints.
PreloadAs = Literal["script", "style", "image"]


class ResourceReference(BaseModel):
    """
    A resource reference as found in a document, plus its resolution context.
    Ephemeral; built per call.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    raw_url: str = Field("", description="URL string as found in the source document (may be empty or relative).")
    base_url: str = Field("", description="Resolution base: the document's <base href>, or its own URL.")
    document_url: str = Field("", description="URL of the document; only used for same-document fragment checks.")


class SubresourceOffset(BaseModel):
    """
    One occurrence of a subresource URL in the source document.

    `start`/`end` are UTF-8 byte offsets into the original document; they are
    carried through untouched so the caller can splice the rewritten URL back.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    kind: SubresourceKind = Field("other", description='Resource kind: "image" or "other".')
    start: int = Field(0, ge=0, description="Byte offset where the URL starts.")
    end: int = Field(0, ge=0, description="Byte offset one past the URL's last byte.")
    desired_image_width: int = Field(
        0,
        description="Requested display width in px. Ignored unless kind == 'image' and the value is > 0.",
    )

    @model_validator(mode="after")
    def _check_range(self) -> SubresourceOffset:
        if self.end < self.start:
            raise ValueError(f"end ({self.end}) must be >= start ({self.start})")
        return self

    @property
    def effective_width(self) -> int:
        """Width to encode in the cache URL, or 0 for none."""
        if self.kind == "image" and self.desired_image_width > 0:
            return self.desired_image_width
        return 0


class CacheURL(BaseModel):
    """A resource URL rewritten onto the cache's domain."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: str = Field(..., description="Absolute https URL on the cache domain.")
    subdomain: str = Field(..., description="Encoded origin label used as the left-most host label.")
    origin_host: str = Field(..., description="Hostname of the original resource (no port).")

    @field_validator("url")
    @classmethod
    def _https_only(cls, v: str) -> str:
        if not v.startswith("https://"):
            raise ValueError(f"cache URLs are always https: {v!r}")
        return v

    def __str__(self) -> str:
        return self.url


class DomainLabel(BaseModel):
    """Result of encoding an origin hostname into a cache subdomain label."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    origin: str = Field(..., description="Origin hostname as given (no port, no trailing dot).")
    encoded: str = Field(..., min_length=1, max_length=63, description="DNS label actually used.")
    human_readable: bool = Field(..., description="False when the opaque hashed fallback was used.")


class FoundSubresource(BaseModel):
    """A subresource reference discovered in a document, before rewriting."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    offset: SubresourceOffset
    url: str = Field(..., description="Attribute value with character references decoded.")
    tag: str = Field(..., description="Lowercased name of the element carrying the reference.")
    preload_as: PreloadAs | None = Field(None, description="Preload destination when the reference is preload-worthy.")
    media: str | None = Field(None, description="Media query of a <link rel=preload as=image>, if any.")


class RewrittenURL(BaseModel):
    """A single rewritten occurrence, keyed by its original offsets."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    offset: SubresourceOffset
    original: str = Field(..., description="The raw URL text found at the offsets.")
    url: str = Field(..., description="Final cache URL spliced in its place.")


# =========================
# Response metadata
# =========================


class Preload(BaseModel):
    """
    A resource to preload when the document is prefetched; emitted as a
    `Link: rel=preload` header alongside the signed exchange.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    url: str = Field(..., description="Absolute URL on the cache domain.")
    as_: PreloadAs = Field(..., alias="as", description="Request destination: script, style or image.")
    media: str | None = Field(None, description="Media query; only meaningful for image preloads.")

    @model_validator(mode="after")
    def _media_for_images_only(self) -> Preload:
        if self.media and self.as_ != "image":
            raise ValueError("media is only allowed on image preloads")
        return self


class Metadata(BaseModel):
    """Extra information returned next to the transformed HTML."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    preloads: list[Preload] = Field(default_factory=list, description="Preload hints in document order.")


# =========================
# Transform requests
# =========================


class HtmlFormat(IntEnum):
    UNKNOWN_CODE = 0  # never used
    AMP = 1
    AMP4ADS = 2
    AMP4EMAIL = 3
    EXPERIMENTAL = 4


# Formats accepted when a request leaves allowed_formats empty.
DEFAULT_ALLOWED_FORMATS: tuple[HtmlFormat, ...] = (HtmlFormat.AMP, HtmlFormat.AMP4ADS, HtmlFormat.AMP4EMAIL)


class TransformersConfig(IntEnum):
    DEFAULT = 0
    NONE = 1
    VALIDATION = 2
    CUSTOM = 3


class VersionRange(BaseModel):
    """An inclusive range of transform version numbers."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    min: int = Field(..., ge=0)
    max: int = Field(..., ge=0)

    def __contains__(self, version: object) -> bool:
        return isinstance(version, int) and self.min <= version <= self.max


class TransformRequest(BaseModel):
    """
    Input and contextual parameters for a document transformation.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    html: str = Field(..., description="The AMP HTML document to transform.")
    document_url: str = Field(..., description="Public URL of the document, as shown in the URL bar.")
    rtv: str = Field("", description="AMP runtime version.")
    css: str = Field("", description="CSS to inline into the transformed HTML.")
    allowed_formats: list[HtmlFormat] = Field(
        default_factory=list,
        description="Formats to transform. Empty means every non-experimental format.",
    )
    config: TransformersConfig = Field(TransformersConfig.DEFAULT, description="Which set of transformers to run.")
    transformers: list[str] = Field(
        default_factory=list,
        description="Ordered transformer names; only honoured when config == CUSTOM.",
    )
    version: int = Field(0, ge=0, description="Transforms version; 0 selects the latest supported.")

    @property
    def effective_formats(self) -> tuple[HtmlFormat, ...]:
        return tuple(self.allowed_formats) or DEFAULT_ALLOWED_FORMATS


class TransformResult(BaseModel):
    """Output of the transform pipeline."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    html: str = Field(..., description="Transformed HTML.")
    metadata: Metadata = Field(default_factory=Metadata)
    rewritten: list[RewrittenURL] = Field(default_factory=list, description="Every occurrence that was rewritten.")
    skipped: list[str] = Field(
        default_factory=list,
        description="Raw URLs left untouched because they do not resolve to http(s).",
    )
