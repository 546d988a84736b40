"""contamscan: assembly resolution and pairwise distance matrices for NCBI datasets."""

__version__ = "0.1.0"

__all__ = ["__version__"]
