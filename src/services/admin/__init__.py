"""Read-only aggregation queries for the admin panel."""
