"""Read-only HTTP query API over the tracking catalogs."""
