# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Sample identity, course and proof image
- An in-memory Enrollment API served through httpx.MockTransport
"""

from decimal import Decimal
from io import BytesIO
from typing import Any

import httpx
import pytest
from PIL import Image

from enrollkit.core.config import PaymentAccountSettings
from enrollkit.models.enrollment import CourseSummary, Identity
from enrollkit.services.enrollment_api.client import EnrollmentAPIClient

API_URL = "http://lms.test/api/v1"
TOKEN = "tok-student-7"


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (full form against a fake API)"
    )


# =============================================================================
# Fake Enrollment API
# =============================================================================


class FakeEnrollmentAPI:
    """In-memory stand-in for the remote enrollment authority.

    Routes requests by method and path. Every request is recorded so tests
    can count calls and inspect payloads.

    Attributes:
        records: Records returned by "list my enrollments".
        courses: Course payloads by id, returned as-is.
        create_status: HTTP status of "create enrollment".
        create_body: JSON body (or raw text) of "create enrollment".
        list_status: HTTP status of "list my enrollments".
        list_envelope: Wrap the list in ``{"data": ...}``.
        list_error: Exception raised instead of answering the list query.
        requests: Every request received.
    """

    def __init__(self) -> None:
        self.records: list[dict[str, Any]] = []
        self.courses: dict[str, Any] = {}
        self.create_status = 201
        self.create_body: Any = None
        self.list_status = 200
        self.list_envelope = True
        self.list_error: Exception | None = None
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.method == "GET" and path.endswith("/my-enrollments"):
            if self.list_error is not None:
                raise self.list_error
            body: Any = {"data": self.records} if self.list_envelope else self.records
            return httpx.Response(self.list_status, json=body)

        if request.method == "POST" and path.endswith("/enrollments"):
            if isinstance(self.create_body, str):
                return httpx.Response(self.create_status, text=self.create_body)
            return httpx.Response(self.create_status, json=self.create_body or {})

        if request.method == "GET" and "/courses/" in path:
            course_id = path.rsplit("/", 1)[-1]
            if course_id not in self.courses:
                return httpx.Response(404, json={"message": "Course not found"})
            return httpx.Response(200, json=self.courses[course_id])

        return httpx.Response(404, json={"message": f"No route for {request.method} {path}"})

    def calls(self, method: str, suffix: str) -> list[httpx.Request]:
        """Recorded requests matching a method and path suffix."""
        return [
            r for r in self.requests
            if r.method == method and r.url.path.endswith(suffix)
        ]

    @property
    def create_calls(self) -> list[httpx.Request]:
        return self.calls("POST", "/enrollments")

    @property
    def list_calls(self) -> list[httpx.Request]:
        return self.calls("GET", "/my-enrollments")


def multipart_fields(request: httpx.Request) -> dict[str, str]:
    """Extract the plain text parts of a multipart request body."""
    boundary = request.headers["content-type"].split("boundary=", 1)[1].encode()
    fields = {}
    for part in request.content.split(b"--" + boundary):
        head, sep, body = part.partition(b"\r\n\r\n")
        if not sep or b"filename=" in head:
            continue
        name = head.split(b'name="', 1)[1].split(b'"', 1)[0].decode()
        fields[name] = body.rstrip(b"\r\n").decode()
    return fields


@pytest.fixture
def parse_multipart():
    """Provide the multipart field extractor."""
    return multipart_fields


@pytest.fixture
def fake_api() -> FakeEnrollmentAPI:
    """Provide an empty fake Enrollment API."""
    return FakeEnrollmentAPI()


@pytest.fixture
def api_client(fake_api: FakeEnrollmentAPI) -> EnrollmentAPIClient:
    """Provide a client wired to the fake API."""
    return EnrollmentAPIClient(
        api_url=API_URL,
        token=TOKEN,
        transport=httpx.MockTransport(fake_api),
    )


# =============================================================================
# Helper Fixtures
# =============================================================================


@pytest.fixture
def identity() -> Identity:
    """Provide a logged-in student."""
    return Identity(
        id=7,
        name="Ayesha Khan",
        email="ayesha@example.com",
        phone="03001234567",
        token=TOKEN,
    )


@pytest.fixture
def course() -> CourseSummary:
    """Provide a discounted course."""
    return CourseSummary(
        id=42,
        title="Python Foundations",
        price=Decimal("4999.00"),
        original_price=Decimal("9999.00"),
        instructor={"name": "Sara Ahmed"},
    )


@pytest.fixture
def payment_accounts() -> PaymentAccountSettings:
    """Provide receiving accounts independent of the environment."""
    return PaymentAccountSettings(
        account_title="Bitcoder Labs",
        jazzcash_number="0300-1234567",
        easypaisa_number="0345-1234567",
        bank_name="Meezan Bank",
        bank_account_number="0101-0104567890",
        bank_iban=None,
    )


@pytest.fixture
def png_bytes() -> bytes:
    """Provide a small valid PNG image."""
    buffer = BytesIO()
    Image.new("RGB", (640, 480), color=(30, 120, 200)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def record_payload() -> dict[str, Any]:
    """Provide a raw enrollment record as the API returns it."""
    return {
        "id": 901,
        "course_id": 42,
        "user_id": 7,
        "status": "pending",
        "created_at": "2025-03-01T10:00:00Z",
    }
