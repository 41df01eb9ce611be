"""Data input/output helpers outside the ingestion core.

Utility modules here keep disk-level concerns isolated from the rest of the
application:
- :mod:`manifest` lists available sources from an explicit ``manifest.json``.
- :mod:`csv_writer` exports downsampled series and spectra.
"""
