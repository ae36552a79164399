"""k1s0 flagclient library."""

from .cache import FlagCache
from .client import FlagClient
from .config import FlagClientConfig, LogSection, load_config
from .exceptions import FlagClientError, FlagClientErrorCodes
from .loader import load_flags, refresh_cache
from .logger import new_client_logger
from .models import Flag, FlagUser, FlagValue, new_anonymous_user, new_user
from .retriever import LocalFileRetriever, Retriever, new_local_file_retriever
from .rules import evaluate_rule, in_percentage, parse_rule
from .variation import Reason, ValueKind, VariationResolver, VariationResult

__all__ = [
    "Flag",
    "FlagCache",
    "FlagClient",
    "FlagClientConfig",
    "FlagClientError",
    "FlagClientErrorCodes",
    "FlagUser",
    "FlagValue",
    "LocalFileRetriever",
    "LogSection",
    "Reason",
    "Retriever",
    "ValueKind",
    "VariationResolver",
    "VariationResult",
    "evaluate_rule",
    "in_percentage",
    "load_config",
    "load_flags",
    "new_anonymous_user",
    "new_client_logger",
    "new_local_file_retriever",
    "new_user",
    "parse_rule",
    "refresh_cache",
]
