"""Club membership register with DONMAN import and CSV export."""
