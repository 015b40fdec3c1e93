"""Profile manager for the oh-my-opencode plugin configuration."""

__version__ = "0.4.0"
