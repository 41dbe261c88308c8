"""Shared helpers for :mod:`officepdf`."""
