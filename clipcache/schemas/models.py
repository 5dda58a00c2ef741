# clipcache/schemas/models.py

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ============================================================
# Fetch policy
# ============================================================

DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


class FetchPolicy(BaseModel):
    """
    Network policy shared by the page extractor and the fetch cache.

    Every outbound request (sharing-page markup and audio bytes alike) uses the
    same browser-like User-Agent, the same timeout, and never goes through a proxy.
    The sharing-site fields describe the one page domain we know how to scrape.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    user_agent: str = Field(
        DEFAULT_USER_AGENT,
        min_length=1,
        description="User-Agent header sent with every request.",
    )
    timeout_s: float = Field(
        15.0,
        gt=0,
        description="Per-request HTTP timeout in seconds (connect and read).",
    )
    sharing_domain: str = Field(
        "myinstants.com",
        min_length=1,
        description="Domain of the sound-sharing site whose pages can be scraped for audio.",
    )
    sharing_origin: str = Field(
        "https://www.myinstants.com",
        description="Canonical scheme+host of the sharing site (used when a page URL cannot be parsed).",
    )
    media_path_segment: str = Field(
        "media/sounds/",
        min_length=1,
        description="Path segment that marks a direct media file on the sharing site.",
    )
    max_workers: int = Field(
        4,
        ge=1,
        description="Thread pool size for background pre-caching.",
    )

    @field_validator("sharing_origin")
    @classmethod
    def _origin_has_scheme(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError("sharing_origin must start with http:// or https://")
        return v

    @field_validator("sharing_domain")
    @classmethod
    def _domain_lower(cls, v: str) -> str:
        return v.strip().lower()


# ============================================================
# Cache contracts
# ============================================================


class EncodedPayload(BaseModel):
    """
    Transportable, immutable result of downloading one audio clip.

    `encoded` is a content-type-tagged base64 data URI
    (`data:<content_type>;base64,<...>`), ready for the transport layer.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    source_url: str = Field(..., description="Resolved URL the bytes were downloaded from (the cache key).")
    content_type: str = Field(..., description="Audio MIME type derived from the URL extension.")
    encoded: str = Field(..., min_length=1, description="data:<content_type>;base64,<payload> string.")
    raw_size: int = Field(..., ge=1, description="Size of the downloaded bytes before encoding.")
    fetched_at: datetime = Field(..., description="UTC timestamp of the download.")

    @property
    def encoded_length(self) -> int:
        return len(self.encoded)

    @property
    def base64_data(self) -> str:
        """The bare base64 part, without the data URI header."""
        return self.encoded.split(",", 1)[1]


class CacheStats(BaseModel):
    """Point-in-time view of the fetch cache for capacity reporting."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    entries: int = Field(0, ge=0, description="Number of cached payloads.")
    in_flight: int = Field(0, ge=0, description="Number of downloads currently running.")
    size_bytes: int = Field(0, ge=0, description="Sum of encoded payload lengths.")

    @property
    def size_kb(self) -> int:
        return self.size_bytes // 1024

    def summary(self) -> str:
        return f"Cache: {self.entries} clips, {self.size_kb} KB ({self.in_flight} downloading)"


class PrefetchReport(BaseModel):
    """Outcome of a background pre-caching run."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    cached: list[str] = Field(default_factory=list, description="URLs downloaded (or joined) during this run.")
    skipped: list[str] = Field(default_factory=list, description="URLs already cached before the run started.")
    failed: dict[str, str] = Field(default_factory=dict, description="URL -> error message for failed downloads.")

    @property
    def ok(self) -> bool:
        return not self.failed
