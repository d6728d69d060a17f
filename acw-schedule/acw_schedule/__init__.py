"""Client-side access layer for the ACW schedule backend."""

from .cache import RequestCache
from .cancel import CancelToken, SharedRequest
from .client import MutationResult, ScheduleClient
from .config import RuntimeConfig, load_env, runtime_config
from .errors import AliasEmpty, AliasNotFound, FetchError, IdentityError, RequestCancelled
from .identity import AliasResolution, DirectoryRecord, IdentityResolver
from .runner import run_limited

__all__ = [
    "AliasEmpty",
    "AliasNotFound",
    "AliasResolution",
    "CancelToken",
    "DirectoryRecord",
    "FetchError",
    "IdentityError",
    "IdentityResolver",
    "MutationResult",
    "RequestCache",
    "RequestCancelled",
    "RuntimeConfig",
    "ScheduleClient",
    "SharedRequest",
    "load_env",
    "run_limited",
    "runtime_config",
]
