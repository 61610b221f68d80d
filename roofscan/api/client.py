"""
Client for the roof scan job API.

    POST /customer                  - start a scan for an address
    GET  /customer/{job_id}/status  - poll job status
    GET  /customer/{job_id}/results - fetch geometry and imagery
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional

import requests
from pydantic import ValidationError

from ..core.config import Settings
from ..core.exceptions import InvalidInputError, ScanJobError
from ..utils.retry import DEFAULT_RETRY_CONFIG, RetryConfig, retry_with_backoff
from .models import ScanJob, ScanJobStatus, ScanRequest, ScanResults

logger = logging.getLogger(__name__)


class SolarScanClient:
    """
    Thin wrapper over the scan job REST API.

    Usage:
        client = SolarScanClient("http://localhost:3000/api/v1")
        job = client.initiate_scan({"address": "Storgatan 5, Malmö"})
        results = client.wait_for_results(job["jobId"])
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        retry_config: Optional[RetryConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_config = retry_config or DEFAULT_RETRY_CONFIG
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    @classmethod
    def from_settings(cls, settings: Settings) -> SolarScanClient:
        return cls(
            base_url=settings.api_base_url,
            timeout=settings.request_timeout,
            retry_config=RetryConfig(max_retries=settings.max_retries),
        )

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> SolarScanClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    # -------------------------------------------------------------------------
    # Endpoints
    # -------------------------------------------------------------------------

    def initiate_scan(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Start a scan. Returns the job payload with the id normalized under "jobId"."""
        try:
            request = ScanRequest.model_validate(payload)
        except ValidationError as exc:
            raise InvalidInputError(f"Invalid scan request: {exc.errors()}", field="payload") from exc
        data = self._request("post", "/customer", json=request.model_dump())
        job = self._parse(ScanJob, data)
        logger.info(f"Scan submitted for {request.address}", extra={"job_id": job.job_id})
        return {**data, "jobId": job.job_id}

    def get_scan_status(self, job_id: str) -> Dict[str, Any]:
        return self._request("get", f"/customer/{job_id}/status")

    def get_scan_results(self, job_id: str) -> Dict[str, Any]:
        return self._request("get", f"/customer/{job_id}/results")

    def wait_for_results(
        self,
        job_id: str,
        poll_interval: float = 2.0,
        timeout: float = 300.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> Dict[str, Any]:
        """
        Poll the job until it completes, then fetch its results.

        Raises:
            ScanJobError: If the job fails or does not finish within timeout
        """
        deadline = clock() + timeout

        while True:
            status = self._parse(ScanJobStatus, self.get_scan_status(job_id), job_id)
            logger.debug(f"Scan status: {status.status}", extra={"job_id": job_id})

            if status.is_completed:
                break
            if status.is_failed:
                raise ScanJobError(
                    f"Scan job {job_id} {status.status}: {status.error or 'no details'}",
                    job_id=job_id,
                    status=status.status,
                )
            if clock() + poll_interval > deadline:
                raise ScanJobError(
                    f"Scan job {job_id} did not complete within {timeout:.0f}s",
                    job_id=job_id,
                    status=status.status,
                )
            sleep(poll_interval)

        results = self.get_scan_results(job_id)
        self._parse(ScanResults, results, job_id)
        return results

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        kwargs.setdefault("timeout", self.timeout)

        @retry_with_backoff(config=self.retry_config)
        def _send() -> requests.Response:
            response = self.session.request(method.upper(), url, **kwargs)
            response.raise_for_status()
            return response

        try:
            response = _send()
        except requests.RequestException as exc:
            raise ScanJobError(f"{method.upper()} {url} failed: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise ScanJobError(f"{method.upper()} {url} returned invalid JSON") from exc

    @staticmethod
    def _parse(model, data: Any, job_id: Optional[str] = None):
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise ScanJobError(
                f"Unexpected {model.__name__} payload: {exc.errors()}", job_id=job_id
            ) from exc
