"""umsugraph - layered graph dataset merging and structural grouping."""

__version__ = "0.3.0"
