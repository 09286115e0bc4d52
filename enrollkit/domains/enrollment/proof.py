# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Proof-of-payment collection.

This module validates and stages the single image a student uploads as
evidence of an off-platform payment, and derives a local preview of it.

Validation rules:
- The declared media type must start with ``image/``.
- The file must not exceed MAX_PROOF_BYTES.

A refused selection never replaces an artifact that is already staged.
The preview is best effort: it is computed in a worker thread and a
failure only leaves ``preview`` empty.
"""

import asyncio
import base64
import logging
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from enrollkit.domains.enrollment.exceptions import FileTooLarge, InvalidFileType
from enrollkit.models.enrollment import ProofArtifact

logger = logging.getLogger(__name__)

MAX_PROOF_BYTES = 5 * 1024 * 1024
PREVIEW_SIZE = (320, 320)


def validate_proof(content: bytes, media_type: str | None) -> None:
    """Check a candidate artifact against the proof rules.

    The type check runs first, so a non-image is refused with
    InvalidFileType whatever its size.

    Args:
        content: Raw file bytes.
        media_type: Declared MIME type.

    Raises:
        InvalidFileType: If the media type is not ``image/*``.
        FileTooLarge: If the file exceeds MAX_PROOF_BYTES.
    """
    if not media_type or not media_type.strip().lower().startswith("image/"):
        raise InvalidFileType(media_type or "")
    if len(content) > MAX_PROOF_BYTES:
        raise FileTooLarge(size=len(content), limit=MAX_PROOF_BYTES)


def render_preview(content: bytes) -> str:
    """Decode an image and return a PNG thumbnail as a ``data:`` URL.

    Raises:
        UnidentifiedImageError: If Pillow cannot decode the bytes.
        OSError: If the image is truncated or otherwise unreadable.
    """
    with Image.open(BytesIO(content)) as image:
        image.thumbnail(PREVIEW_SIZE)
        if image.mode not in ("RGB", "RGBA", "L", "LA"):
            image = image.convert("RGBA")
        buffer = BytesIO()
        image.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode("utf-8")
    return f"data:image/png;base64,{encoded}"


class ProofOfPaymentCollector:
    """Stages exactly one proof-of-payment image.

    Attributes:
        artifact: The staged artifact, or None.
        preview: ``data:`` URL of the staged artifact's thumbnail, or None.
    """

    def __init__(self) -> None:
        self.artifact: ProofArtifact | None = None
        self.preview: str | None = None
        self._preview_task: asyncio.Task | None = None

    @property
    def has_artifact(self) -> bool:
        return self.artifact is not None

    def select(
        self,
        content: bytes,
        media_type: str | None,
        filename: str | None = None,
    ) -> ProofArtifact:
        """Validate and stage a file, replacing any staged artifact.

        When called inside a running event loop, preview derivation is
        scheduled in the background; await wait_for_preview() to join it.

        Args:
            content: Raw file bytes.
            media_type: Declared MIME type.
            filename: Original file name.

        Returns:
            The staged artifact.

        Raises:
            InvalidFileType: If the file is not an image.
            FileTooLarge: If the file exceeds the limit.
        """
        validate_proof(content, media_type)

        artifact = ProofArtifact(
            content=content,
            media_type=media_type.strip().lower(),
            filename=filename or "payment-proof",
        )
        self._cancel_preview()
        self.artifact = artifact
        self.preview = None

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None:
            self._preview_task = loop.create_task(self._derive_preview(artifact))

        logger.debug(
            "Staged payment proof: filename=%s, type=%s, bytes=%d",
            artifact.filename,
            artifact.media_type,
            artifact.size,
        )
        return artifact

    def remove(self) -> None:
        """Clear the staged artifact and its preview together."""
        self._cancel_preview()
        self.artifact = None
        self.preview = None

    async def wait_for_preview(self) -> str | None:
        """Wait for a pending preview derivation and return the preview."""
        task = self._preview_task
        if task is not None:
            await asyncio.wait({task})
        return self.preview

    async def _derive_preview(self, artifact: ProofArtifact) -> None:
        try:
            preview = await asyncio.to_thread(render_preview, artifact.content)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            logger.warning("Could not derive payment proof preview: %s", e)
            return
        # Removed or replaced while rendering
        if self.artifact is artifact:
            self.preview = preview

    def _cancel_preview(self) -> None:
        if self._preview_task is not None and not self._preview_task.done():
            self._preview_task.cancel()
        self._preview_task = None
