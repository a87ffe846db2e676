"""CSV export of members."""
