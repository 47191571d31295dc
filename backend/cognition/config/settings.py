"""Application-wide configuration loaded from environment variables."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Redis (result cache + interaction store)
REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379")

# Keyword lexicon used by the analyzers
MARKERS_FILE: Path = Path(
    os.getenv("COGNITIVE_MARKERS_FILE", str(Path(__file__).resolve().parent / "markers.yaml"))
)

# ── Result Cache ─────────────────────────────────────────────────────────

COGNITIVE_CACHE_PREFIX: str = os.getenv("COGNITIVE_CACHE_PREFIX", "cognitive:profile:")
COGNITIVE_CACHE_TTL: int = int(os.getenv("COGNITIVE_CACHE_TTL", "300"))  # 5 min
# Stale entries stay readable for ttl * factor before Redis evicts them
COGNITIVE_CACHE_RETENTION_FACTOR: int = int(os.getenv("COGNITIVE_CACHE_RETENTION_FACTOR", "12"))

# ── Interaction Store ────────────────────────────────────────────────────

INTERACTION_PREFIX: str = os.getenv("INTERACTION_PREFIX", "interactions:")
EMOTION_PREFIX: str = os.getenv("EMOTION_PREFIX", "emotions:")
ACTIVE_USERS_KEY: str = os.getenv("ACTIVE_USERS_KEY", "interactions:active")
INTERACTION_HISTORY_LIMIT: int = int(os.getenv("INTERACTION_HISTORY_LIMIT", "500"))

# ── Background Scheduler ─────────────────────────────────────────────────

COGNITIVE_TICK_INTERVAL: float = float(os.getenv("COGNITIVE_TICK_INTERVAL", "30"))
COGNITIVE_ACTIVE_WINDOW_MINUTES: int = int(os.getenv("COGNITIVE_ACTIVE_WINDOW_MINUTES", "60"))
COGNITIVE_BATCH_SIZE: int = int(os.getenv("COGNITIVE_BATCH_SIZE", "10"))
COGNITIVE_ANALYSIS_TIMEOUT: float = float(os.getenv("COGNITIVE_ANALYSIS_TIMEOUT", "10"))
COGNITIVE_WINDOW_SIZE: int = int(os.getenv("COGNITIVE_WINDOW_SIZE", "50"))

# ── Agent Configuration ──────────────────────────────────────────────────

COGNITIVE_ANALYST_SEED: str = os.getenv(
    "COGNITIVE_ANALYST_SEED", "cognition-analyst-seed-v1"
)
COGNITIVE_ANALYST_PORT: int = int(os.getenv("COGNITIVE_ANALYST_PORT", "8010"))

# Set to "agentverse" to deploy on Agentverse (uses mailbox, no local endpoint).
# Set to "local" (default) for local dev with localhost endpoints.
AGENT_DEPLOY_MODE: str = os.getenv("AGENT_DEPLOY_MODE", "local")
AGENT_ENDPOINT_BASE: str = os.getenv("AGENT_ENDPOINT_BASE", "http://localhost")

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
