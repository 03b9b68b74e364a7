"""Package version, shared by the CLI, the web server and packaging."""

__version__ = "0.3.0"
