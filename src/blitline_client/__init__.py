"""
Blitline Client - job builder and submission facade for the Blitline image API

This package composes Blitline image-processing jobs and submits them to the
service's job endpoint. It provides:

- A fluent builder for job specifications (source image, function tree, save destinations)
- A catalog of typed image functions (resize, crop, grayscale, annotate, ...)
- Serialization to the service's JSON wire format
- A service facade that pre-populates jobs from configuration and submits them
- Postback URL providers and a FastAPI router for completion notifications

Key Components:
    - functions: Function base class, concrete functions and the Blitline shorthand namespace
    - saved_image: Output descriptors and their destinations
    - job: Sources, the immutable Job and its JobBuilder
    - service: BlitlineImageService facade
    - configuration: Config loading from YAML, environment and overrides
    - postback: Postback URL providers and the completion receiver
    - models: Pydantic models for the request and response documents
    - exceptions: Error hierarchy

Usage:
    service = BlitlineImageService(load_config())
    job = service.load_url("http://example.com/photo.jpg").apply(
        Blitline.to_gray_scale().and_save_result_to(
            SavedImage.with_id("photo.gray").to_s3("my-bucket", "photo-gray.jpg")
        )
    )
    result = service.submit_job(job)
"""

from .configuration import BlitlineConfig, load_config
from .exceptions import BlitlineError, ConstructionError, SerializationError, TransportError
from .functions import Blitline, CompositeOp, Function, Gravity
from .job import Job, JobBuilder, S3Source, UrlSource
from .models import JobResult, PostbackResult
from .postback import (
    CallablePostbackUrlProvider,
    PostbackUrlProvider,
    StaticPostbackUrlProvider,
    create_postback_router,
)
from .saved_image import AzureDestination, S3Destination, SavedImage, UrlDestination
from .service import BlitlineImageService

__all__ = [
    "AzureDestination",
    "Blitline",
    "BlitlineConfig",
    "BlitlineError",
    "BlitlineImageService",
    "CallablePostbackUrlProvider",
    "CompositeOp",
    "ConstructionError",
    "Function",
    "Gravity",
    "Job",
    "JobBuilder",
    "JobResult",
    "PostbackResult",
    "PostbackUrlProvider",
    "S3Destination",
    "S3Source",
    "SavedImage",
    "SerializationError",
    "StaticPostbackUrlProvider",
    "TransportError",
    "UrlDestination",
    "UrlSource",
    "create_postback_router",
    "load_config",
]
