"""Marketplace platform profiles."""

from parcelhub.platforms.base import PlatformProfile

__all__ = ["PlatformProfile"]
