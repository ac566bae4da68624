"""Models for image repository and image policy resources, with conditions, durations and a kind registry."""

__version__ = "0.1.0"
__all__ = ["conditions", "duration", "objects", "scheme", "v1beta1", "v1beta2"]