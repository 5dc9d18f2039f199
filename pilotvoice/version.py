"""Application version."""
APP_VERSION = "0.4.0"
