# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for proof-of-payment collection."""

import asyncio

import pytest

from enrollkit.domains.enrollment.exceptions import FileTooLarge, InvalidFileType
from enrollkit.domains.enrollment.proof import (
    MAX_PROOF_BYTES,
    ProofOfPaymentCollector,
    render_preview,
    validate_proof,
)


@pytest.mark.unit
class TestValidateProof:
    """Tests for the proof rules."""

    def test_accepts_exactly_five_megabytes(self):
        """Test a file of exactly the limit is accepted."""
        assert MAX_PROOF_BYTES == 5_242_880

        validate_proof(b"\0" * 5_242_880, "image/png")

    def test_rejects_one_byte_over(self):
        """Test a file one byte over the limit is refused."""
        with pytest.raises(FileTooLarge) as exc_info:
            validate_proof(b"\0" * 5_242_881, "image/png")

        assert exc_info.value.size == 5_242_881
        assert exc_info.value.message == "File size must be less than 5MB."

    def test_rejects_pdf(self):
        """Test a non-image media type is refused."""
        with pytest.raises(InvalidFileType) as exc_info:
            validate_proof(b"%PDF-1.7", "application/pdf")

        assert exc_info.value.message == "Please upload an image file."

    def test_type_checked_before_size(self):
        """Test an oversized non-image is refused for its type."""
        with pytest.raises(InvalidFileType):
            validate_proof(b"\0" * (MAX_PROOF_BYTES + 1), "application/pdf")

    def test_missing_media_type(self):
        """Test a file without a declared type is refused."""
        with pytest.raises(InvalidFileType):
            validate_proof(b"abc", None)

    def test_media_type_case_insensitive(self):
        """Test image types are matched regardless of case."""
        validate_proof(b"abc", "IMAGE/JPEG")


@pytest.mark.unit
class TestProofOfPaymentCollector:
    """Tests for staging a proof artifact."""

    def test_select_outside_event_loop(self, png_bytes):
        """Test staging works without a running loop, with no preview."""
        collector = ProofOfPaymentCollector()

        artifact = collector.select(png_bytes, "image/png", "receipt.png")

        assert collector.artifact is artifact
        assert artifact.size == len(png_bytes)
        assert artifact.filename == "receipt.png"
        assert collector.preview is None

    def test_refused_selection_keeps_prior_artifact(self, png_bytes):
        """Test a refused file does not displace the staged one."""
        collector = ProofOfPaymentCollector()
        staged = collector.select(png_bytes, "image/png")

        with pytest.raises(InvalidFileType):
            collector.select(b"%PDF-1.7", "application/pdf")
        with pytest.raises(FileTooLarge):
            collector.select(b"\0" * (MAX_PROOF_BYTES + 1), "image/png")

        assert collector.artifact is staged

    def test_replace_artifact(self, png_bytes):
        """Test a new valid selection replaces the staged artifact."""
        collector = ProofOfPaymentCollector()
        collector.select(png_bytes, "image/png", "first.png")

        second = collector.select(png_bytes, "image/jpeg", "second.jpg")

        assert collector.artifact is second
        assert collector.artifact.media_type == "image/jpeg"

    def test_remove_clears_artifact_and_preview(self, png_bytes):
        """Test removal clears both the artifact and its preview."""
        collector = ProofOfPaymentCollector()
        collector.select(png_bytes, "image/png")
        collector.preview = "data:image/png;base64,AAAA"

        collector.remove()

        assert collector.artifact is None
        assert collector.preview is None
        assert collector.has_artifact is False

    @pytest.mark.asyncio
    async def test_preview_derived_in_background(self, png_bytes):
        """Test a preview data URL is derived for a valid image."""
        collector = ProofOfPaymentCollector()
        collector.select(png_bytes, "image/png")

        preview = await collector.wait_for_preview()

        assert preview is not None
        assert preview.startswith("data:image/png;base64,")

    @pytest.mark.asyncio
    async def test_undecodable_image_leaves_no_preview(self):
        """Test a preview failure keeps the artifact and no preview."""
        collector = ProofOfPaymentCollector()
        collector.select(b"not really a png", "image/png")

        preview = await collector.wait_for_preview()

        assert preview is None
        assert collector.has_artifact is True

    @pytest.mark.asyncio
    async def test_removed_artifact_gets_no_preview(self, png_bytes):
        """Test a preview finishing after removal is discarded."""
        collector = ProofOfPaymentCollector()
        collector.select(png_bytes, "image/png")
        task = collector._preview_task

        collector.remove()
        await asyncio.wait({task})

        assert task.done()
        assert collector.preview is None


@pytest.mark.unit
class TestRenderPreview:
    """Tests for thumbnail rendering."""

    def test_thumbnail_is_png_data_url(self, png_bytes):
        """Test the preview is a PNG data URL."""
        preview = render_preview(png_bytes)

        assert preview.startswith("data:image/png;base64,")
