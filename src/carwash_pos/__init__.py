"""Car-wash point-of-sale pricing, commission and payment engine."""

__version__ = "0.1.0"
