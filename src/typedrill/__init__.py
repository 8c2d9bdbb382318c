"""Typedrill - typing practice sessions, matching policies and statistics."""

from .__version__ import __version__
from .config import TypedrillSettings, configure_logging, load_settings
from .controller import SessionController
from .engine import TypingEngine
from .errors import DataFetchError, EmptySourceError, SessionStateError, TypedrillError
from .models import (
    CompletedItem,
    Level,
    PolicyKind,
    SessionConfig,
    SessionResult,
    SessionSnapshot,
    SessionState,
)
from .policies import (
    Evaluation,
    MatchPolicy,
    SpaceDelimitedPolicy,
    StreamingTextPolicy,
    WholeWordPolicy,
    policy_for,
)
from .stats import compute
from .wordlists import JsonDirectoryWordSource, RedisWordSource, WordListLoader

__all__ = [
    "SessionController",
    "TypingEngine",
    "TypedrillSettings",
    "configure_logging",
    "load_settings",
    "compute",
    "CompletedItem",
    "Level",
    "PolicyKind",
    "SessionConfig",
    "SessionResult",
    "SessionSnapshot",
    "SessionState",
    "Evaluation",
    "MatchPolicy",
    "WholeWordPolicy",
    "SpaceDelimitedPolicy",
    "StreamingTextPolicy",
    "policy_for",
    "JsonDirectoryWordSource",
    "RedisWordSource",
    "WordListLoader",
    "TypedrillError",
    "DataFetchError",
    "EmptySourceError",
    "SessionStateError",
    "__version__",
]
