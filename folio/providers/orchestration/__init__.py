from .simple import SimpleOrchestrationProvider

__all__ = ["SimpleOrchestrationProvider"]
