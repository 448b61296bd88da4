from llm_nexus.core.background.task_pool import BackgroundTaskPool

__all__ = ["BackgroundTaskPool"]
