"""snipflow - snippet trigger orchestration and interaction layer."""

__version__ = "0.1.0"
