"""Session services - valuation and detail views over the repository."""
