"""
Session domain module
"""
from .models import SessionResult, ProgressCallback
from .runner import CommandRunner, AsyncProcessRunner, DiagnosticStream
from .agent import AgentLocator
from .executor import SessionExecutor, wrap_remote_command

__all__ = [
    "SessionResult",
    "ProgressCallback",
    "CommandRunner",
    "AsyncProcessRunner",
    "DiagnosticStream",
    "AgentLocator",
    "SessionExecutor",
    "wrap_remote_command",
]
