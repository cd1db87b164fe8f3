"""Green Community API package."""
