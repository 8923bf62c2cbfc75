"""JoeCoin – monitoring API package."""
