"""Per-file workflow: classification and plan execution."""

from anivault.workflow.classifier import classify, describe_plan
from anivault.workflow.transform import FileTransformer

__all__ = [
    "FileTransformer",
    "classify",
    "describe_plan",
]
