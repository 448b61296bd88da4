"""LLM Nexus: a gateway in front of interchangeable text-generation backends."""

__version__ = "1.0.0"
