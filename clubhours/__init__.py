"""Club membership backend: volunteer work hours, eligibility and family totals."""

__version__ = "1.0.0"
