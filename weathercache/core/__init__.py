"""Framework-free weather fetch, cache and refresh core."""
