"""milpay - Military pay calculators and LES analysis."""

__version__ = "0.1.0"
