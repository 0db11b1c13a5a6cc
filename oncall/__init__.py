"""On-call schedule storage and coverage analysis."""
