"""Scan job API client."""

from .client import SolarScanClient
from .models import ScanJob, ScanJobStatus, ScanRequest, ScanResults

__all__ = [
    "SolarScanClient",
    "ScanJob",
    "ScanJobStatus",
    "ScanRequest",
    "ScanResults",
]
