"""
Application services.

Exports:
  - IngestionCoordinator: Upload orchestration
  - QueryDispatcher: Inference request/response handling
  - ChatService: Chat session registry
"""

from docchat.application.services.chat_service import ChatService
from docchat.application.services.ingestion_service import IngestionCoordinator
from docchat.application.services.query_dispatcher import QueryDispatcher

__all__ = ["ChatService", "IngestionCoordinator", "QueryDispatcher"]
