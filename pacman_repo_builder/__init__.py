"""Manage a custom pacman repository built from a collection of PKGBUILD directories."""

__version__ = "0.0.65"