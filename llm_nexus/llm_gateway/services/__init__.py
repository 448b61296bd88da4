from llm_nexus.llm_gateway.services.request_orchestrator import RequestOrchestrator

__all__ = ["RequestOrchestrator"]
