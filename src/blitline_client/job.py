"""
Job specifications and the builder that assembles them.

A JobBuilder owns a mutable draft. ``build()`` copies the draft into an
immutable Job, so a builder can keep being changed (or reused as a template)
without affecting jobs that were already built.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from .exceptions import ConstructionError
from .functions import Function
from .models import JobPayload, S3SourcePayload


@dataclass(frozen=True)
class UrlSource:
    uri: str

    def to_payload(self) -> str:
        return self.uri


@dataclass(frozen=True)
class S3Source:
    bucket: str
    key: str

    def to_payload(self) -> S3SourcePayload:
        return S3SourcePayload(bucket=self.bucket, key=self.key)


Source = Union[UrlSource, S3Source]


@dataclass(frozen=True)
class Job:
    """An immutable job ready to be submitted."""

    application_id: str
    src: Source
    functions: Tuple[Function, ...] = ()
    postback_url: Optional[str] = None
    extended_metadata: bool = False
    retry_postback: bool = False
    wait_retry_delay: Optional[int] = None
    hash: Optional[str] = None
    get_exif: bool = False

    @staticmethod
    def for_application(application_id: str) -> JobBuilder:
        return JobBuilder(application_id)

    def to_payload(self) -> JobPayload:
        return JobPayload(
            application_id=self.application_id,
            src=self.src.to_payload(),
            postback_url=self.postback_url,
            extended_metadata=self.extended_metadata or None,
            retry_postback=self.retry_postback or None,
            wait_retry_delay=self.wait_retry_delay,
            hash=self.hash,
            get_exif=self.get_exif or None,
            functions=[function.to_payload() for function in self.functions],
        )

    def to_dict(self) -> Dict[str, Any]:
        return self.to_payload().to_wire()

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


class JobBuilder:
    """Fluent, mutable draft of a Job. Every setter returns the builder."""

    def __init__(self, application_id: str) -> None:
        if application_id is None or not str(application_id).strip():
            raise ConstructionError("Application ID must not be empty")
        self.application_id = str(application_id)
        self.src: Optional[Source] = None
        self.functions: List[Function] = []
        self.postback_url: Optional[str] = None
        self.extended_metadata = False
        self.retry_postback = False
        self.wait_retry_delay: Optional[int] = None
        self.hash: Optional[str] = None
        self.get_exif = False

    def from_url(self, uri: str) -> JobBuilder:
        if not uri or not str(uri).strip():
            raise ConstructionError("Source URL must not be empty")
        self.src = UrlSource(str(uri))
        return self

    def from_s3(self, bucket: Optional[str], key: str) -> JobBuilder:
        if not bucket or not str(bucket).strip():
            raise ConstructionError("Source S3 bucket must not be empty")
        if not key or not str(key).strip():
            raise ConstructionError("Source S3 key must not be empty")
        self.src = S3Source(str(bucket), str(key))
        return self

    def with_postback(self, url: Optional[str]) -> JobBuilder:
        self.postback_url = str(url) if url else None
        return self

    def with_extended_metadata(self) -> JobBuilder:
        self.extended_metadata = True
        return self

    def with_retry_postback(self) -> JobBuilder:
        self.retry_postback = True
        return self

    def with_wait_retry_delay(self, seconds: int) -> JobBuilder:
        """Ask the service to keep retrying a source URL that is not available yet."""
        self.wait_retry_delay = seconds
        return self

    def with_hash(self, kind: str = "md5") -> JobBuilder:
        self.hash = kind
        return self

    def with_exif(self) -> JobBuilder:
        self.get_exif = True
        return self

    def apply(self, *functions: Function) -> JobBuilder:
        """Append root functions, each applied to the source image. Returns the builder."""
        if not functions:
            raise ConstructionError("apply() needs at least one function")
        for function in functions:
            if not isinstance(function, Function):
                raise ConstructionError(f"Expected a Function, got {type(function).__name__}")
            self.functions.append(function)
        return self

    def build(self) -> Job:
        if self.src is None:
            raise ConstructionError("Job has no source; call from_url() or from_s3() before building")

        functions = tuple(function.copy() for function in self.functions)
        seen = set()
        for function in functions:
            for saved in function.iter_saved_images():
                if saved.image_identifier in seen:
                    raise ConstructionError(f"Duplicate image identifier '{saved.image_identifier}' in job")
                seen.add(saved.image_identifier)

        return Job(
            application_id=self.application_id,
            src=self.src,
            functions=functions,
            postback_url=self.postback_url,
            extended_metadata=self.extended_metadata,
            retry_postback=self.retry_postback,
            wait_retry_delay=self.wait_retry_delay,
            hash=self.hash,
            get_exif=self.get_exif,
        )

    def __repr__(self) -> str:
        return f"JobBuilder(application_id={self.application_id!r}, src={self.src!r}, functions={len(self.functions)})"
