"""Django app exposing the weather lookup and health endpoints."""
