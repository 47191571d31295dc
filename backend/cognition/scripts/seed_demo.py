"""Seed Redis with demo conversations for three contrasting users.

Run: python -m cognition.scripts.seed_demo (from backend/)
"""

from datetime import datetime, timedelta, timezone

import redis

from cognition.config.settings import ACTIVE_USERS_KEY, EMOTION_PREFIX, INTERACTION_PREFIX, REDIS_URL
from cognition.data_pipeline.interaction_store import RedisInteractionStore
from cognition.models.interaction import Actor, Interaction

DEMO_USERS = {
    "demo-engineer": [
        "I need the exact steps to fix this bug in the deploy process",
        "What's the process to deploy the api server?",
        "Can you show me the database query that fails? I want to analyze the data first",
        "First check the config, then the endpoint, then restart the server",
        "How do I isolate the root cause of the error in the function?",
        "Give me a checklist for the deployment process",
    ],
    "demo-casual": [
        "hey lol",
        "yeah that's cool haha",
        "omg gonna try that",
        "nah dude too much",
        "what's the latest news today?",
    ],
    "demo-reflective": [
        "I feel like I've been overwhelmed lately and I'm not sure how to plan my week. "
        "I think my approach to goals has been too rigid and I tend to give up when "
        "a deadline slips. I appreciate you listening, it helps to talk it through.",
        "I realize I want to learn how to bounce back faster. What if I tried a different "
        "approach, like a smaller daily goal instead of a big weekly plan?",
        "Thank you, I understand the idea. Please help me think about how that fits the "
        "bigger picture of what I want this year, overall and in the long term.",
    ],
}

DEMO_EMOTIONS = {
    "demo-engineer": [("focused", 6), ("frustrated", 7), ("focused", 5)],
    "demo-casual": [("happy", 6), ("happy", 7)],
    "demo-reflective": [("anxious", 8), ("hopeful", 5), ("calm", 4), ("hopeful", 6)],
}


def clear_demo(r: redis.Redis) -> None:
    for user_id in DEMO_USERS:
        r.delete(f"{INTERACTION_PREFIX}{user_id}", f"{EMOTION_PREFIX}{user_id}")
        r.zrem(ACTIVE_USERS_KEY, user_id)


def seed(r: redis.Redis | None = None) -> RedisInteractionStore:
    r = r or redis.Redis.from_url(REDIS_URL, decode_responses=True)
    clear_demo(r)
    store = RedisInteractionStore(r)

    now = datetime.now(timezone.utc)
    for user_id, messages in DEMO_USERS.items():
        start = now - timedelta(minutes=2 * len(messages))
        for i, text in enumerate(messages):
            ts = start + timedelta(minutes=2 * i)
            store.record_interaction(user_id, Interaction(Actor.USER, text, ts.isoformat()))
            store.record_interaction(
                user_id,
                Interaction(Actor.ASSISTANT, "Got it. Tell me more?", (ts + timedelta(seconds=30)).isoformat()),
            )
        for emotion, intensity in DEMO_EMOTIONS[user_id]:
            store.record_emotion(user_id, emotion, intensity)

    return store


if __name__ == "__main__":
    seed()
    print(f"Seeded {len(DEMO_USERS)} demo users:")
    for user_id, messages in DEMO_USERS.items():
        print(f"  [{user_id}] {len(messages)} user messages")
