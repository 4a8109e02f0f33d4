"""HTTP views of the api app, grouped by resource."""
