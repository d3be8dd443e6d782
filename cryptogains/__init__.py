"""Realized-gain tax lot accounting for cryptocurrency transaction logs."""

__version__ = "1.0.0"
