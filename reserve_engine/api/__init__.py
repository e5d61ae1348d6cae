"""HTTP surface for the reserve engine."""
