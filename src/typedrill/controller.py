"""Session controller: lifecycle, countdown and result."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from typing import Optional

from .config import TypedrillSettings, build_word_source
from .engine import TypingEngine
from .errors import DataFetchError, SessionStateError
from .models import (
    SessionConfig,
    SessionResult,
    SessionSnapshot,
    SessionState,
    WordList,
)
from .policies import Evaluation
from .stats import compute
from .telemetry import get_telemetry
from .timer import CountdownTimer
from .wordlists import WordListLoader, WordSource

logger = logging.getLogger(__name__)

Listener = Callable[[SessionSnapshot], None]

_CONFIGURABLE = (SessionState.IDLE, SessionState.FINISHED)


class SessionController:
    """
    Own the typing session state machine.

    States:
        idle --start--> running --tick(0)--> finished --start--> running
        running --pause--> paused --resume--> running

    All mutation happens through the transition methods. Renderers read
    ``snapshot()`` or register with ``subscribe()``.

    Usage:
        async with SessionController(config, source=source) as session:
            await session.refresh_words()
            session.start()
            session.handle_input("cat ")
            result = await session.wait_finished()
    """

    def __init__(
        self,
        config: SessionConfig | None = None,
        *,
        source: WordSource | None = None,
        loader: WordListLoader | None = None,
        tick_interval: float | None = None,
        settings: TypedrillSettings | None = None,
    ):
        """
        Initialize controller.

        Args:
            config: Session config (defaults to ``settings.session_config()``)
            source: Word source (defaults to the backend in settings)
            loader: Prebuilt loader, overrides ``source``
            tick_interval: Seconds per countdown tick
            settings: Settings used for any argument not given
        """
        if settings is None and (
            config is None or tick_interval is None or (loader is None and source is None)
        ):
            settings = TypedrillSettings()

        self._config = config if config is not None else settings.session_config()
        if loader is None:
            if source is None:
                source = build_word_source(settings)
            loader = WordListLoader(
                source, shuffle=settings.shuffle if settings else True
            )
        self._loader = loader

        interval = (
            tick_interval
            if tick_interval is not None
            else settings.tick_interval_seconds
        )
        self._timer = CountdownTimer(self.tick, interval=interval)
        self._engine = TypingEngine(policy=self._config.policy)
        self._state = SessionState.IDLE
        self._remaining = 0
        self._result: Optional[SessionResult] = None
        self._finished = asyncio.Event()
        self._listeners: list[Listener] = []

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def remaining_seconds(self) -> int:
        return self._remaining

    @property
    def result(self) -> Optional[SessionResult]:
        return self._result

    @property
    def words(self) -> WordList:
        return self._engine.words

    @property
    def engine(self) -> TypingEngine:
        return self._engine

    async def __aenter__(self) -> SessionController:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # Configuration

    def configure(self, config: SessionConfig) -> None:
        """Replace the session config. Does not fetch words."""
        self._require(_CONFIGURABLE, "configure")
        policy_changed = config.policy is not self._config.policy
        self._config = config
        if policy_changed:
            self._engine.set_policy(config.policy)
        self._notify()

    def load_words(self, words: Iterable[str]) -> None:
        """Install a word list directly."""
        self._require(_CONFIGURABLE, "load words")
        self._engine.load(words)
        self._notify()

    async def refresh_words(self) -> bool:
        """
        Fetch the word list for the current config.

        Returns:
            True if the word list was replaced. On fetch failure the previous
            list is kept and False is returned.
        """
        config = self._config
        try:
            words = await self._loader.load(config)
        except DataFetchError as e:
            logger.warning(
                "Word list fetch failed, keeping previous list",
                extra={
                    "language": config.language,
                    "level": config.level.value,
                    "error": e.message,
                },
            )
            return False

        if self._state not in _CONFIGURABLE or config is not self._config:
            logger.info(
                "Discarding word list loaded for a stale config",
                extra={"language": config.language, "level": config.level.value},
            )
            return False

        self._engine.load(words)
        self._notify()
        return True

    async def select(self, config: SessionConfig) -> bool:
        """Configure and refetch words when the lookup key or policy changed."""
        previous = self._config
        self.configure(config)
        if (
            config.key == previous.key
            and config.policy is previous.policy
            and self._engine.words
        ):
            return False
        return await self.refresh_words()

    # Lifecycle

    def start(self) -> None:
        """Start (or restart) a session. No-op without words."""
        self._require(_CONFIGURABLE, "start")
        if not self._engine.words:
            logger.warning(
                "Start ignored, word list is empty",
                extra={"language": self._config.language},
            )
            return

        # Raises without a running loop, before any state changes.
        self._timer.start()
        self._engine.reset()
        self._result = None
        if self._finished.is_set():
            self._finished = asyncio.Event()
        self._remaining = self._config.duration_seconds
        self._state = SessionState.RUNNING

        get_telemetry().record_session_started(policy=self._config.policy.value)
        logger.info(
            "Session started",
            extra={
                "language": self._config.language,
                "level": self._config.level.value,
                "duration_seconds": self._config.duration_seconds,
                "policy": self._config.policy.value,
            },
        )
        self._notify()

    def pause(self) -> None:
        self._require_pause_capability("pause")
        self._require((SessionState.RUNNING,), "pause")
        self._timer.cancel()
        self._state = SessionState.PAUSED
        logger.info("Session paused", extra={"remaining_seconds": self._remaining})
        self._notify()

    def resume(self) -> None:
        self._require_pause_capability("resume")
        self._require((SessionState.PAUSED,), "resume")
        self._timer.start()
        self._state = SessionState.RUNNING
        logger.info("Session resumed", extra={"remaining_seconds": self._remaining})
        self._notify()

    def reset(self) -> None:
        """Return to idle and clear all session data."""
        self._timer.cancel()
        self._engine.reset()
        self._state = SessionState.IDLE
        self._remaining = 0
        self._result = None
        # Wake waiters on the abandoned session; they see no result.
        self._finished.set()
        self._finished = asyncio.Event()
        logger.info("Session reset")
        self._notify()

    def tick(self) -> None:
        """Advance the countdown by one second."""
        if self._state is not SessionState.RUNNING:
            return

        self._remaining = max(0, self._remaining - 1)
        if self._remaining == 0:
            self._finish()
        else:
            self._notify()

    def handle_input(self, value: str) -> Evaluation | None:
        """Feed the current input buffer. Ignored unless running."""
        if self._state is not SessionState.RUNNING:
            return None
        evaluation = self._engine.handle_input(value)
        self._notify()
        return evaluation

    async def wait_finished(self) -> SessionResult:
        """Wait for the current session to finish."""
        finished = self._finished
        await finished.wait()
        if self._result is None:
            raise SessionStateError("read result", self._state.value)
        return self._result

    async def aclose(self) -> None:
        """Tear down the countdown timer."""
        await self._timer.aclose()

    # Rendering

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            state=self._state,
            config=self._config,
            remaining_seconds=self._remaining,
            current_target=self._engine.current_target,
            input_buffer=self._engine.input_buffer,
            cursor=self._engine.cursor,
            completed=self._engine.completed,
            result=self._result,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a snapshot listener. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # Internals

    def _finish(self) -> None:
        self._timer.cancel()
        self._state = SessionState.FINISHED
        elapsed = self._config.duration_seconds - self._remaining
        self._result = compute(
            self._engine.result_items(),
            elapsed,
            self._engine.typed_character_count(),
        )
        self._finished.set()

        get_telemetry().record_session_finished(
            policy=self._config.policy.value, wpm=self._result.words_per_minute
        )
        logger.info(
            "Session finished",
            extra={
                "words_per_minute": self._result.words_per_minute,
                "accuracy": self._result.accuracy,
                "total_words": self._result.total_words,
            },
        )
        self._notify()

    def _require(self, states: tuple[SessionState, ...], operation: str) -> None:
        if self._state not in states:
            raise SessionStateError(operation, self._state.value)

    def _require_pause_capability(self, operation: str) -> None:
        if not self._config.allow_pause:
            raise SessionStateError(
                operation, self._state.value, reason=f"cannot {operation}, pause is disabled"
            )

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error("Snapshot listener failed", exc_info=e)
