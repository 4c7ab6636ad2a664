# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Enumeration types for database models."""

from enum import Enum


class VerificationPurpose(str, Enum):
    """What an emailed verification code may be used for."""

    RECOVERY = "recovery"
