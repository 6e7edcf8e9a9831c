"""TFactorTx explorer web application (FastAPI + Jinja2 + HTMX)."""

__version__ = "0.2.0b2"
