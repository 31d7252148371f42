"""Infrastructure layer: external services behind the application interfaces."""
