"""Service layer for RDI Quote.

Provides address normalization, provider verification, classification,
pricing, notification routing and the per-request pipeline that ties them
together.
"""

from src.services.classifier import classify
from src.services.notification_router import NotificationRouter, should_dispatch
from src.services.pipeline import AddressCheckPipeline, PipelineMode, PipelineOutcome
from src.services.rate_calculator import price

__all__ = [
    "AddressCheckPipeline",
    "PipelineMode",
    "PipelineOutcome",
    "NotificationRouter",
    "should_dispatch",
    "classify",
    "price",
]
