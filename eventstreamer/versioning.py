"""Centralised version and naming information for eventstreamer.

This module is the single source of truth for the package version so the
runtime and packaging metadata do not drift apart.
"""
from __future__ import annotations


APP_NAME: str = "eventstreamer"
APP_VERSION: str = "1.0.0"
