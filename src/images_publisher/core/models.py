"""Shared data models for the images publisher."""

from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

AddressingStyle = Literal["path", "virtual"]
UrlFormat = Literal["raw", "markdown", "bbcode"]


class ImageItem(BaseModel):
    """An image read from a local source, ready for the pipeline."""

    model_config = ConfigDict(frozen=True)

    source_identifier: str
    data: bytes
    filename_hint: str = ""
    extension: str = "png"

    @field_validator("extension", mode="before")
    @classmethod
    def normalize_extension(cls, v):
        if not v:
            return "png"
        return str(v).lower().lstrip(".")

    @property
    def size(self) -> int:
        return len(self.data)


class CompressionResult(BaseModel):
    """Output of the remote compression service for one image."""

    output: bytes
    before_size: int = Field(ge=0)
    after_size: int = Field(ge=0)
    usage_counter: Optional[str] = None

    @model_validator(mode="after")
    def check_after_size(self) -> "CompressionResult":
        if self.after_size != len(self.output):
            raise ValueError("after_size must equal the length of output")
        return self


class StoreConfig(BaseModel):
    """Connection settings for the S3-compatible object store."""

    model_config = ConfigDict(frozen=True)

    endpoint: str
    region: str
    bucket: str
    access_key_id: str
    secret_access_key: str
    addressing_style: AddressingStyle = "path"
    key_prefix: str = ""

    @property
    def force_path_style(self) -> bool:
        return self.addressing_style == "path"


class PublicUrlConfig(BaseModel):
    """Settings used to derive the public URL of a stored key."""

    model_config = ConfigDict(frozen=True)

    use_custom_base: bool = False
    custom_base: Optional[str] = None
    endpoint: str
    bucket: str
    addressing_style: AddressingStyle = "path"

    @classmethod
    def from_store(
        cls,
        store: StoreConfig,
        use_custom_base: bool = False,
        custom_base: Optional[str] = None,
    ) -> "PublicUrlConfig":
        return cls(
            use_custom_base=use_custom_base,
            custom_base=custom_base,
            endpoint=store.endpoint,
            bucket=store.bucket,
            addressing_style=store.addressing_style,
        )


class PublisherConfig(BaseModel):
    """Immutable configuration for one command invocation."""

    model_config = ConfigDict(frozen=True)

    store: StoreConfig
    public_url: PublicUrlConfig
    url_format: UrlFormat = "raw"
    compression_api_key: Optional[str] = None
    compress: bool = True
    request_timeout: Optional[float] = None


class PipelineState(str, Enum):
    """States of a single item run, in the only order they can occur."""

    IDLE = "idle"
    ACQUIRING = "acquiring"
    COMPRESSING = "compressing"
    UPLOADING = "uploading"
    PUBLISHING = "publishing"
    DONE = "done"


class ItemSuccess(BaseModel):
    """Outcome of an item that was uploaded and published."""

    status: Literal["success"] = "success"
    source_identifier: str = ""
    key: str
    url: str
    formatted_url: str
    original_size: int
    final_size: int
    usage_counter: Optional[str] = None
    clipboard_written: bool = False


class ItemFailure(BaseModel):
    """Outcome of an item that failed at some phase."""

    status: Literal["failure"] = "failure"
    source_identifier: str
    error_message: str
    phase: str = "pipeline"
    status_code: Optional[int] = None


ItemOutcome = Union[ItemSuccess, ItemFailure]


class BatchStatus(str, Enum):
    """Overall result of a batch run."""

    NO_CANDIDATES = "no_candidates"
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILURE = "failure"


class BatchSummary(BaseModel):
    """Aggregate result of a batch run, built as each item completes."""

    succeeded: List[ItemSuccess] = Field(default_factory=list)
    failed: List[ItemFailure] = Field(default_factory=list)
    total_original_bytes: int = 0
    total_final_bytes: int = 0
    clipboard_written: bool = False

    def record(self, outcome: ItemOutcome) -> None:
        """Fold one item outcome into the summary."""
        if isinstance(outcome, ItemSuccess):
            self.succeeded.append(outcome)
            self.total_original_bytes += outcome.original_size
            self.total_final_bytes += outcome.final_size
        else:
            self.failed.append(outcome)

    @property
    def total_items(self) -> int:
        return len(self.succeeded) + len(self.failed)

    @property
    def status(self) -> BatchStatus:
        if self.total_items == 0:
            return BatchStatus.NO_CANDIDATES
        if not self.failed:
            return BatchStatus.SUCCESS
        if self.succeeded:
            return BatchStatus.PARTIAL
        return BatchStatus.FAILURE

    @property
    def saved_bytes(self) -> int:
        return self.total_original_bytes - self.total_final_bytes

    @property
    def formatted_urls(self) -> List[str]:
        return [outcome.formatted_url for outcome in self.succeeded]
