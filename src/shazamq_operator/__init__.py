# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

"""Kubernetes operator for Shazamq log-streaming clusters."""

__version__ = "0.1.0"
