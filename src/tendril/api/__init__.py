"""HTTP API for tendril documents."""
