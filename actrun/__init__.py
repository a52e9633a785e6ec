"""Building blocks for running workflow jobs locally: expressions, job pipelines, job logging, actions and step helpers."""

__version__ = "0.1.0"