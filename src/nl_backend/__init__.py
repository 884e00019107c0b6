"""Nepal Locations backend: read-only API over the administrative hierarchy."""
