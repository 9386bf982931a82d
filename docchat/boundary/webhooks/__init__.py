"""
HTTP adapters for the external processing webhook and inference endpoint.

Dependencies: httpx
"""

from docchat.boundary.webhooks.inference_client import InferenceClient
from docchat.boundary.webhooks.processing_client import ProcessingWebhookClient

__all__ = ["InferenceClient", "ProcessingWebhookClient"]
