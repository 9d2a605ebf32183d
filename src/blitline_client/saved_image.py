"""
Output descriptors for processed images.

A SavedImage names one result (the identifier the service echoes back in its
responses and postbacks) and says where the service should write it. Exactly
one destination is set per SavedImage:

    SavedImage.with_id("abcd1234.thumb").to_s3("destination-bucket", "thumb.jpg")
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple, Union

from .exceptions import ConstructionError
from .models import AzureDestinationPayload, S3LocationPayload, SavePayload, UrlDestinationPayload


@dataclass(frozen=True)
class S3Destination:
    bucket: str
    key: str
    headers: Tuple[Tuple[str, str], ...] = ()


@dataclass(frozen=True)
class UrlDestination:
    uri: str


@dataclass(frozen=True)
class AzureDestination:
    account_name: str
    shared_access_signature: str


Destination = Union[S3Destination, UrlDestination, AzureDestination]


def _require(value: Optional[str], what: str) -> str:
    if value is None or not str(value).strip():
        raise ConstructionError(f"{what} must not be empty")
    return str(value)


class SavedImage:
    """A named sink for the output of one function."""

    def __init__(self, image_identifier: str) -> None:
        self.image_identifier = _require(image_identifier, "Image identifier")
        self.destination: Optional[Destination] = None
        self.type: Optional[str] = None
        self.quality: Optional[int] = None
        self.extension: Optional[str] = None
        self.save_metadata: Optional[bool] = None
        self.interlace: Optional[bool] = None

    @classmethod
    def with_id(cls, image_identifier: str) -> SavedImage:
        return cls(image_identifier)

    def _set_destination(self, destination: Destination) -> SavedImage:
        if self.destination is not None:
            raise ConstructionError(
                f"Saved image '{self.image_identifier}' already has a destination: {self.destination}"
            )
        self.destination = destination
        return self

    def to_s3(self, bucket: str, key: str) -> SavedImage:
        return self._set_destination(S3Destination(_require(bucket, "S3 bucket"), _require(key, "S3 key")))

    def to_url(self, uri: str) -> SavedImage:
        return self._set_destination(UrlDestination(_require(uri, "Destination URL")))

    def to_azure(self, account_name: str, shared_access_signature: str) -> SavedImage:
        return self._set_destination(
            AzureDestination(_require(account_name, "Azure account name"), _require(shared_access_signature, "Azure SAS"))
        )

    def with_s3_header(self, name: str, value: str) -> SavedImage:
        """Add an HTTP header (e.g. ``x-amz-acl``) sent with the S3 upload."""
        if not isinstance(self.destination, S3Destination):
            raise ConstructionError("S3 headers can only be set after to_s3()")
        headers = tuple((key, val) for key, val in self.destination.headers if key != name)
        self.destination = replace(self.destination, headers=headers + ((name, value),))
        return self

    def as_type(self, image_type: str) -> SavedImage:
        self.type = image_type
        return self

    def with_quality(self, quality: int) -> SavedImage:
        self.quality = quality
        return self

    def with_extension(self, extension: str) -> SavedImage:
        self.extension = extension
        return self

    def with_metadata(self, save_metadata: bool = True) -> SavedImage:
        self.save_metadata = save_metadata
        return self

    def interlaced(self, interlace: bool = True) -> SavedImage:
        self.interlace = interlace
        return self

    @property
    def has_destination(self) -> bool:
        return self.destination is not None

    def ensure_destination(self) -> SavedImage:
        if self.destination is None:
            raise ConstructionError(
                f"Saved image '{self.image_identifier}' has no destination; call to_s3(), to_url() or to_azure()"
            )
        return self

    def to_payload(self) -> SavePayload:
        destination = self.ensure_destination().destination
        payload = SavePayload(
            image_identifier=self.image_identifier,
            type=self.type,
            quality=self.quality,
            extension=self.extension,
            save_metadata=self.save_metadata,
            interlace=self.interlace,
        )
        if isinstance(destination, S3Destination):
            payload.s3_destination = S3LocationPayload(
                bucket=destination.bucket, key=destination.key, headers=dict(destination.headers) or None
            )
        elif isinstance(destination, UrlDestination):
            payload.url_destination = UrlDestinationPayload(url=destination.uri)
        else:
            payload.azure_destination = AzureDestinationPayload(
                account_name=destination.account_name,
                shared_access_signature=destination.shared_access_signature,
            )
        return payload

    def __repr__(self) -> str:
        return f"SavedImage(image_identifier={self.image_identifier!r}, destination={self.destination!r})"
