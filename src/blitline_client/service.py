"""
Service facade for the Blitline image-processing API.

BlitlineImageService holds the long-lived settings (application ID, default
source bucket, postback URL provider, extended-metadata default) and hands out
job builders pre-populated with them. A typical use:

    service = BlitlineImageService(load_config(), postback_url_provider=provider)

    job = service.load_s3_key("sourceimg.jpg").apply(
        Blitline.resize_to_fit(512, 384).and_save_result_to(
            SavedImage.with_id("abcd1234.color").to_s3("destination-bucket", "dest-color.jpg")
        ).then_apply(
            Blitline.to_gray_scale().and_save_result_to(
                SavedImage.with_id("abcd1234.gray").to_s3("destination-bucket", "dest-gray.jpg")
            )
        )
    )

    result = service.submit_job(job)

The settings are plain attributes and may be changed at any time; the
service does no locking, so callers sharing one instance across threads must
not reconfigure it while submitting.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

import requests
from pydantic import ValidationError

from .configuration import BlitlineConfig, load_config
from .exceptions import ConstructionError, TransportError
from .job import Job, JobBuilder
from .models import JobResult, SubmitResponse
from .postback import PostbackUrlProvider

logger = logging.getLogger(__name__)

JobLike = Union[Job, JobBuilder]


class BlitlineImageService:
    """
    Facade for building and submitting Blitline jobs.

    Attributes:
        application_id: Blitline application ID embedded in every job
        s3_bucket: Default source bucket for ``load_s3_key``
        always_extended_metadata: Request extended metadata on every job
        postback_url_provider: Consulted each time a job builder is created
        submit_url: Job submission endpoint
        timeout: Request timeout in seconds passed to the HTTP session
        session: requests.Session used for all submissions
    """

    def __init__(
        self,
        config: BlitlineConfig,
        postback_url_provider: Optional[PostbackUrlProvider] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.application_id = config.application_id
        self.s3_bucket = config.s3_source_bucket
        self.always_extended_metadata = config.always_extended_metadata
        self.submit_url = config.submit_url
        self.timeout = config.timeout
        self.postback_url_provider = postback_url_provider
        self.session = session or requests.Session()

    @classmethod
    def from_config_file(
        cls,
        path: Optional[Union[str, Path]] = None,
        postback_url_provider: Optional[PostbackUrlProvider] = None,
        session: Optional[requests.Session] = None,
        **overrides: Any,
    ) -> BlitlineImageService:
        return cls(load_config(path, overrides), postback_url_provider=postback_url_provider, session=session)

    def job_builder(self) -> JobBuilder:
        """
        Create a job builder with the application ID set, along with the
        postback URL and extended-metadata flag when configured.

        The postback URL is fetched from the provider on every call. The
        returned builder has no source set.
        """
        builder = Job.for_application(self.application_id)
        if self.postback_url_provider is not None:
            builder.with_postback(self.postback_url_provider.get_postback_url())
        if self.always_extended_metadata:
            builder.with_extended_metadata()
        return builder

    def load_url(self, src: str) -> JobBuilder:
        return self.job_builder().from_url(src)

    def load_s3_key(self, key: str) -> JobBuilder:
        """Create a job builder that loads ``key`` from the configured source bucket."""
        if not self.s3_bucket:
            raise ConstructionError("No default S3 source bucket configured; use load_s3_object()")
        return self.job_builder().from_s3(self.s3_bucket, key)

    def load_s3_object(self, bucket: str, key: str) -> JobBuilder:
        return self.job_builder().from_s3(bucket, key)

    def submit_job(self, job: JobLike) -> JobResult:
        """
        Submit one job and return the service's acknowledgment.

        Args:
            job: A built Job, or a JobBuilder which is built first

        Returns:
            The parsed JobResult; check ``error`` for problems the service
            reported about the job itself

        Raises:
            ConstructionError: if a builder cannot be built
            SerializationError: if a function parameter cannot be encoded
            TransportError: on network failure, non-2xx status or an unusable response body
        """
        payload = self._as_job(job).to_dict()
        (result,) = self._post(payload, expected=1)
        self._log_result(result)
        return result

    def submit_jobs(self, jobs: Iterable[JobLike]) -> List[JobResult]:
        """Submit several jobs in a single request; results come back in submission order."""
        payload = [self._as_job(job).to_dict() for job in jobs]
        if not payload:
            raise ConstructionError("submit_jobs() needs at least one job")
        results = self._post(payload, expected=len(payload))
        for result in results:
            self._log_result(result)
        return results

    @staticmethod
    def _as_job(job: JobLike) -> Job:
        if isinstance(job, JobBuilder):
            return job.build()
        if isinstance(job, Job):
            return job
        raise ConstructionError(f"Expected a Job or JobBuilder, got {type(job).__name__}")

    def _post(self, payload: Any, expected: int) -> List[JobResult]:
        """POST the payload and return exactly ``expected`` results."""
        logger.info(f"Submitting Blitline job to {self.submit_url}")
        logger.debug(f"Blitline job payload: {payload}")
        try:
            response = self.session.post(self.submit_url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error(f"Blitline submission failed: {exc}")
            raise TransportError(f"Blitline submission to {self.submit_url} failed: {exc}") from exc

        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            logger.error(f"Blitline responded with HTTP {response.status_code}")
            raise TransportError(
                f"Blitline responded with HTTP {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            ) from exc

        try:
            results = SubmitResponse.model_validate_json(response.content).results
        except ValidationError as exc:
            logger.error(f"Unreadable Blitline response: {response.text[:200]}")
            raise TransportError(
                "Blitline response could not be parsed",
                status_code=response.status_code,
                body=response.text,
            ) from exc

        if not isinstance(results, list):
            results = [results]
        if len(results) != expected:
            logger.error(f"Blitline returned {len(results)} result(s) for {expected} job(s)")
            raise TransportError(
                f"Blitline returned {len(results)} result(s) for {expected} submitted job(s)",
                status_code=response.status_code,
                body=response.text,
            )
        return results

    @staticmethod
    def _log_result(result: JobResult) -> None:
        if result.error is not None:
            logger.warning(f"Blitline rejected job: {result.error}")
        else:
            logger.info(f"Blitline accepted job {result.job_id}")

    def __repr__(self) -> str:
        parts = [f"application_id={self.application_id}"]
        if self.postback_url_provider is not None:
            parts.append(f"postback_url_provider={self.postback_url_provider!r}")
        if self.s3_bucket is not None:
            parts.append(f"s3_bucket={self.s3_bucket}")
        return f"BlitlineImageService[{','.join(parts)}]"
