"""Use-case layer: session gate, client facade and session policy."""

from .client import ApiClient, unwrap
from .messages import describe_failure
from .session import SessionManager
from .session_gate import SessionGate

__all__ = ["ApiClient", "SessionGate", "SessionManager", "describe_failure", "unwrap"]
