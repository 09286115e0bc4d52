"""enrollkit.

Course enrollment requests backed by proof of an off-platform payment,
with status gating and reconciliation of duplicate submissions against
the remote enrollment authority.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
