"""Code Intelligence Digest: ranking and selection for curated feeds."""

__version__ = "0.1.0"
