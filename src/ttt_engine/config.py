"""Session configuration.

Environment-first: TTT_AI_ENABLED, TTT_AI_PLAYER and TTT_PRUNE override the
defaults; command-line flags override the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _env_flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    val = raw.strip().lower()
    if val in _TRUE:
        return True
    if val in _FALSE:
        return False
    raise ValueError(f"{name} must be one of {sorted(_TRUE | _FALSE)}, got {raw!r}")


def _env_player(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    if raw.strip() not in ("0", "1"):
        raise ValueError(f"{name} must be 0 or 1, got {raw!r}")
    return int(raw)


@dataclass(frozen=True)
class SessionConfig:
    ai_enabled: bool = True
    ai_player: int = 1
    prune: bool = True

    def __post_init__(self) -> None:
        if self.ai_player not in (0, 1):
            raise ValueError(f"ai_player must be 0 or 1, got {self.ai_player!r}")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "SessionConfig":
        if env is None:
            env = os.environ
        d = cls()
        return cls(
            ai_enabled=_env_flag(env, "TTT_AI_ENABLED", d.ai_enabled),
            ai_player=_env_player(env, "TTT_AI_PLAYER", d.ai_player),
            prune=_env_flag(env, "TTT_PRUNE", d.prune),
        )

    def with_overrides(self, **changes: object) -> "SessionConfig":
        """Copy with the given fields replaced; None values are ignored."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})
