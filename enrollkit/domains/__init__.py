# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain layer for enrollkit.

Domains:
    enrollment: Course enrollment requests, proof of payment, and
        reconciliation with the remote enrollment authority.
"""
