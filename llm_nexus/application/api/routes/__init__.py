from llm_nexus.application.api.routes import generation, health, users

__all__ = ["generation", "health", "users"]
