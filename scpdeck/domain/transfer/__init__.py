"""
Transfer domain module
"""
from .models import (
    TaskStatus,
    TransferDirection,
    TransferItemStatus,
    TransferTarget,
    TransferBatch,
    BatchReport,
)
from .payload import DragPayload, decode_drag_payload, encode_remote_payload
from .service import TransferService

__all__ = [
    "TaskStatus",
    "TransferDirection",
    "TransferItemStatus",
    "TransferTarget",
    "TransferBatch",
    "BatchReport",
    "DragPayload",
    "decode_drag_payload",
    "encode_remote_payload",
    "TransferService",
]
