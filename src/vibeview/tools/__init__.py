"""Miscellaneous development tools.

Currently only :mod:`debug`, which provides opt-in timing of the expensive
pipeline steps (enable with ``VIBEVIEW_DEBUG=1``).
"""
