from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import BlitlineError


class S3LocationPayload(BaseModel):
    bucket: str
    key: str
    headers: Optional[Dict[str, str]] = None


class S3SourcePayload(BaseModel):
    name: str = "s3"
    bucket: str
    key: str


class UrlDestinationPayload(BaseModel):
    url: str


class AzureDestinationPayload(BaseModel):
    account_name: str
    shared_access_signature: str


class SavePayload(BaseModel):
    image_identifier: str
    s3_destination: Optional[S3LocationPayload] = None
    url_destination: Optional[UrlDestinationPayload] = None
    azure_destination: Optional[AzureDestinationPayload] = None
    type: Optional[str] = None
    quality: Optional[int] = None
    extension: Optional[str] = None
    save_metadata: Optional[bool] = None
    interlace: Optional[bool] = None


class FunctionPayload(BaseModel):
    name: str
    params: Optional[Dict[str, Any]] = None
    save: Optional[Union[SavePayload, List[SavePayload]]] = None
    functions: Optional[List[FunctionPayload]] = None


class JobPayload(BaseModel):
    application_id: str
    src: Union[str, S3SourcePayload]
    postback_url: Optional[str] = None
    extended_metadata: Optional[bool] = None
    retry_postback: Optional[bool] = None
    wait_retry_delay: Optional[int] = None
    hash: Optional[str] = None
    get_exif: Optional[bool] = None
    functions: List[FunctionPayload] = Field(default_factory=list)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


FunctionPayload.model_rebuild()


class ImageResult(BaseModel):
    """One saved image as reported by the service."""

    model_config = ConfigDict(extra="ignore")

    image_identifier: str
    s3_url: Optional[str] = None


class JobResult(BaseModel):
    """
    Acknowledgment returned by the job endpoint for one submitted job.

    The service reports problems with the job document itself (a bad
    application ID, an unknown function) inside a successful response, so
    ``error`` has to be checked by the caller, or converted into an exception
    with ``raise_for_error``.
    """

    model_config = ConfigDict(extra="ignore")

    job_id: Optional[str] = None
    images: List[ImageResult] = Field(default_factory=list)
    error: Optional[Union[str, Dict[str, Any]]] = None

    @property
    def is_successful(self) -> bool:
        return self.error is None and self.job_id is not None

    def raise_for_error(self) -> JobResult:
        if self.error is not None:
            raise BlitlineError(f"Blitline rejected job: {self.error}")
        return self


class SubmitResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    results: Union[List[JobResult], JobResult]


class ImageMeta(BaseModel):
    model_config = ConfigDict(extra="allow")

    width: Optional[int] = None
    height: Optional[int] = None


class PostbackImage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    image_identifier: str
    s3_url: Optional[str] = None
    meta: Optional[ImageMeta] = None


class PostbackResult(BaseModel):
    """Completion notification posted by the service to the job's postback URL."""

    model_config = ConfigDict(extra="ignore")

    job_id: str
    images: List[PostbackImage] = Field(default_factory=list)
    original_meta: Optional[Dict[str, Any]] = None
    error: Optional[Union[str, Dict[str, Any]]] = None

    @property
    def is_successful(self) -> bool:
        return self.error is None


class PostbackEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    results: PostbackResult
