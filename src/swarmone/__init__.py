"""
Swarmone - client for a swarm consensus service.

Sends an instruction to a service that runs several candidate responders
and a judge, then reconciles the judge's per-runner scores into a stable
display view.
"""

__version__ = "0.1.0"

from .client import (
    CancelToken,
    ConsensusClient,
    ErrorKind,
    RequestCancelled,
    RequestError,
)
from .config import ClientConfig, load_config
from .instruction import TaskForm, build_instruction
from .models import (
    AskRequest,
    ConsensusResult,
    HealthStatus,
    RunnerState,
    RunnerView,
)
from .scores import reconcile

__all__ = [
    # Version
    "__version__",
    # Client
    "CancelToken",
    "ConsensusClient",
    "ErrorKind",
    "RequestCancelled",
    "RequestError",
    # Config
    "ClientConfig",
    "load_config",
    # Instruction
    "TaskForm",
    "build_instruction",
    # Models
    "AskRequest",
    "ConsensusResult",
    "HealthStatus",
    "RunnerState",
    "RunnerView",
    # Reconciler
    "reconcile",
]
