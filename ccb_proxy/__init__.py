"""CCB form-response proxy."""

__version__ = "1.0.0"
