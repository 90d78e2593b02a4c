# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_resolver

import hashlib

from loguru import logger

from coreason_resolver.models import Report


class AuditIntegrator:
    """Standalone audit logging of resolution attempts.

    Logs one line per resolution to the application logger.
    """

    def __init__(self, service_name: str = "coreason-resolver", enabled: bool = True):
        """Initializes the AuditIntegrator.

        Args:
            service_name: The name of the service (default: 'coreason-resolver').
            enabled: Whether to enable audit logging.
        """
        self.service_name = service_name
        self.enabled = enabled
        if self.enabled:
            logger.info("Audit logging enabled (Local Mode - application log only)")

    def log_resolution(self, report: Report) -> str:
        """Log the outcome of a resolution.

        The record identifier is logged as a SHA-256 hash.

        Args:
            report: The finished report.

        Returns:
            str: The SHA-256 hash of the record identifier.
        """
        id_hash = hashlib.sha256(report.record_id.encode("utf-8")).hexdigest()
        if self.enabled:
            logger.bind(service=self.service_name).info(
                f"AUDIT: Resolved record. Hash: {id_hash}, Outcome: {report.outcome.value}, "
                f"Path: {report.storage_path}"
            )
        return id_hash
