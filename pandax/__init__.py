"""Admin back-end services on SQLite and Flask: scheduled jobs, logs, resources, work-flow and code-generation settings."""

__version__ = "0.1.0"