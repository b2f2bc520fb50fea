"""Infrastructure layer for NurseCare: configuration and settings."""
