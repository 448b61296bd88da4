"""Request orchestration: domain models and the orchestrator service."""
