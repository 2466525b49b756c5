"""Publishing site: PDF issues, an admin upload API and a flipbook reader."""

__version__ = "1.0.0"
