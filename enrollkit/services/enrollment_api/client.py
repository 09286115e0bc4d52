# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment API client.

This module provides an async HTTP client for the remote enrollment
authority and the course catalog it hosts.

The client handles:
- The "list my enrollments" query
- The multipart "create enrollment" command
- Course lookups used for the summary and the authoritative amount

Example:
    client = EnrollmentAPIClient(
        api_url="https://lms.example.com/api/v1",
        token="user-bearer-token",
    )

    records = await client.list_my_enrollments()
    course = await client.get_course("42")
"""

import json
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from enrollkit.core.config.settings import EnrollmentAPISettings, get_settings
from enrollkit.models.enrollment import CourseSummary, EnrollmentRecord, ProofArtifact
from enrollkit.services.enrollment_api.exceptions import (
    CourseNotFoundError,
    EnrollmentAPIError,
    EnrollmentTransportError,
)

logger = logging.getLogger(__name__)

PROOF_FIELD = "payment_proof"


def _unwrap(payload: Any) -> Any:
    """Strip up to two ``{"data": ...}`` envelopes."""
    for _ in range(2):
        if isinstance(payload, dict) and "data" in payload and payload["data"] is not None:
            payload = payload["data"]
        else:
            break
    return payload


class EnrollmentAPIClient:
    """Async HTTP client for the Enrollment API.

    A fresh httpx.AsyncClient is opened per call; nothing needs closing.

    Attributes:
        api_url: Base URL of the API, including the version prefix.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        api_url: str,
        token: str | None = None,
        timeout: float = 30.0,
        settings: EnrollmentAPISettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the Enrollment API client.

        Args:
            api_url: Base URL of the API server.
            token: Bearer token of the current user.
            timeout: Request timeout in seconds.
            settings: Endpoint paths; defaults to EnrollmentAPISettings().
            transport: Optional httpx transport (used by tests).
        """
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._token = token
        self._paths = settings or EnrollmentAPISettings()
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "EnrollmentAPIClient":
        """Build a client from application settings.

        Args:
            token: Bearer token of the current user.
            transport: Optional httpx transport.

        Returns:
            Configured client.
        """
        api = get_settings().enrollment_api
        return cls(
            api_url=api.url,
            token=token,
            timeout=api.timeout,
            settings=api,
            transport=transport,
        )

    def _get_headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.api_url,
            timeout=self.timeout,
            headers=self._get_headers(),
            transport=self._transport,
        )

    def _error_from_response(
        self,
        response: httpx.Response,
        default_message: str,
    ) -> EnrollmentAPIError:
        """Build an EnrollmentAPIError from a non-success response."""
        message = default_message
        try:
            data = response.json()
        except ValueError:
            data = None

        if isinstance(data, dict):
            message = data.get("message") or data.get("error") or default_message
        elif response.text:
            message = response.text

        return EnrollmentAPIError(
            message=str(message),
            status_code=response.status_code,
            response_body=response.text,
        )

    def _transport_error(self, exc: httpx.RequestError, operation: str) -> EnrollmentTransportError:
        logger.error("Enrollment API connection error during %s: %s", operation, exc)
        return EnrollmentTransportError(
            message=f"Failed to connect to Enrollment API: {exc}",
            details={"error_type": type(exc).__name__},
        )

    async def list_my_enrollments(self) -> list[EnrollmentRecord]:
        """Get all enrollment records of the current user.

        Records with an unknown status or missing fields are skipped.

        Returns:
            Parsed enrollment records.

        Raises:
            EnrollmentAPIError: If the API returns an error.
            EnrollmentTransportError: If the API is unreachable.
        """
        logger.debug("Listing my enrollments")

        try:
            async with self._http() as http:
                response = await http.get(self._paths.my_enrollments_path)
        except httpx.RequestError as e:
            raise self._transport_error(e, "list_my_enrollments") from e

        if response.status_code != 200:
            raise self._error_from_response(response, "Failed to list enrollments")

        try:
            payload = _unwrap(response.json())
        except ValueError as e:
            raise EnrollmentAPIError(
                message="Enrollment list is not valid JSON",
                status_code=response.status_code,
                response_body=response.text,
            ) from e

        if not isinstance(payload, list):
            raise EnrollmentAPIError(
                message="Unexpected enrollment list shape",
                status_code=response.status_code,
                response_body=response.text,
            )

        records = []
        for item in payload:
            try:
                records.append(EnrollmentRecord.model_validate(item))
            except ValidationError as e:
                logger.debug("Skipping unparseable enrollment record: %s", e)

        return records

    async def create_enrollment(
        self,
        fields: dict[str, str],
        proof: ProofArtifact,
    ) -> EnrollmentRecord | None:
        """Submit a multipart enrollment request.

        Args:
            fields: Flat form fields (bracket notation for nested objects).
            proof: Proof-of-payment image sent as the ``payment_proof`` part.

        Returns:
            The created record, or None if the response did not carry one.

        Raises:
            EnrollmentAPIError: If the API rejects the request.
            EnrollmentTransportError: If the API is unreachable.
        """
        logger.debug(
            "Creating enrollment: course=%s, method=%s, proof_bytes=%d",
            fields.get("course_id"),
            fields.get("payment_method"),
            proof.size,
        )

        files = {PROOF_FIELD: (proof.filename, proof.content, proof.media_type)}

        try:
            async with self._http() as http:
                response = await http.post(
                    self._paths.enrollments_path,
                    data=fields,
                    files=files,
                )
        except httpx.RequestError as e:
            raise self._transport_error(e, "create_enrollment") from e

        if response.status_code not in (200, 201):
            raise self._error_from_response(response, "Failed to create enrollment")

        try:
            payload = _unwrap(response.json())
        except ValueError:
            payload = None

        record = None
        if isinstance(payload, dict):
            try:
                record = EnrollmentRecord.model_validate(payload)
            except ValidationError:
                logger.debug("Create response did not include a record: %s", json.dumps(payload)[:200])

        logger.info(
            "Created enrollment: id=%s, course=%s",
            record.id if record else None,
            fields.get("course_id"),
        )
        return record

    async def get_course(self, course_id: str) -> CourseSummary:
        """Get a course from the catalog.

        Args:
            course_id: Course identifier.

        Returns:
            Course summary with the authoritative price.

        Raises:
            CourseNotFoundError: If the course does not exist.
            EnrollmentAPIError: If the API returns an error.
            EnrollmentTransportError: If the API is unreachable.
        """
        logger.debug("Getting course: id=%s", course_id)

        try:
            async with self._http() as http:
                response = await http.get(f"{self._paths.courses_path}/{course_id}")
        except httpx.RequestError as e:
            raise self._transport_error(e, "get_course") from e

        if response.status_code == 404:
            raise CourseNotFoundError(message="Course not found", course_id=str(course_id))

        if response.status_code != 200:
            raise self._error_from_response(response, "Failed to get course")

        try:
            return CourseSummary.model_validate(_unwrap(response.json()))
        except (ValueError, ValidationError) as e:
            raise EnrollmentAPIError(
                message="Unexpected course payload",
                status_code=response.status_code,
                response_body=response.text,
            ) from e
