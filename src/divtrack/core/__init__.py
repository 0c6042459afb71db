"""Core domain models and valuation logic - no direct I/O."""
