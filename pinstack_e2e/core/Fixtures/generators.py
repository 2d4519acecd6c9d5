# generators.py
# Description: Randomized, seedable request payloads for gateway scenarios
#
"""
Data Generators
---------------

Produces valid request payloads for every gateway endpoint the scenarios use.
A single ``random.Random`` behind a lock backs each generator, so sub-cases on
worker threads can share one. Set ``TEST_SEED`` to replay a run's data.
"""

import os
import random
import string
import threading
import time
from typing import List, Optional

from loguru import logger

from pinstack_e2e.core.Gateway.schemas import (
    CreatePostRequest,
    CreateUserRequest,
    LoginRequest,
    MediaItemInput,
    RegisterRequest,
    SendNotificationRequest,
    UpdateAvatarRequest,
    UpdatePasswordRequest,
    UpdatePostRequest,
    UpdateUserRequest,
    UserJourney,
)

SEED_ENV = "TEST_SEED"

# Password lengths
DEFAULT_PASSWORD_LENGTH = 10
UPDATED_PASSWORD_LENGTH = 12

# Collection sizes
MAX_MEDIA_ITEMS = 5
MIN_TAG_ITEMS = 1
MAX_TAG_ITEMS = 4
MAX_MEDIA_POSITION = 9

# Image sizes for generated URLs
AVATAR_SIZE = 300
POST_IMAGE_WIDTH = 800
POST_IMAGE_HEIGHT = 600

# User journey shape
JOURNEY_POST_COUNT = 3
JOURNEY_NOTIFICATION_COUNT = 5
JOURNEY_OTHER_USERS_COUNT = 5

MEDIA_TYPE_IMAGE = "image"
MEDIA_TYPE_VIDEO = "video"
MEDIA_TYPES = (MEDIA_TYPE_IMAGE, MEDIA_TYPE_VIDEO)

NOTIFICATION_TYPE_FOLLOW = "follow"
NOTIFICATION_TYPE_LIKE = "like"
NOTIFICATION_TYPE_COMMENT = "comment"
NOTIFICATION_TYPE_MENTION = "mention"
NOTIFICATION_TYPE_SYSTEM = "system"
# Emitted by the relation outbox after a follow, never sent by clients
NOTIFICATION_TYPE_FOLLOW_CREATED = "follow_created"
NOTIFICATION_TYPES = (
    NOTIFICATION_TYPE_FOLLOW,
    NOTIFICATION_TYPE_LIKE,
    NOTIFICATION_TYPE_COMMENT,
    NOTIFICATION_TYPE_MENTION,
    NOTIFICATION_TYPE_SYSTEM,
)
PAYLOAD_DATA_KEY = "data"

_SPECIALS = "!@#$%^&*"
_FIRST_NAMES = [
    "Alice", "Boris", "Chen", "Dana", "Elif", "Farid", "Greta", "Hiro",
    "Ines", "Jonas", "Kira", "Luca", "Mara", "Nikolai", "Olu", "Priya",
]
_LAST_NAMES = [
    "Ahmed", "Bauer", "Costa", "Dubois", "Evans", "Fischer", "Garcia", "Hansen",
    "Ivanova", "Jensen", "Kowalski", "Lopez", "Moreau", "Novak", "Okafor", "Petrov",
]
_WORDS = [
    "pin", "board", "sunset", "coffee", "vinyl", "mountain", "sketch", "garden",
    "harbor", "lantern", "meadow", "pixel", "river", "signal", "tundra", "velvet",
    "amber", "canvas", "drift", "ember", "fjord", "glacier", "horizon", "island",
]


class DataGenerator:
    """Generate payloads for the gateway API from one seeded random source."""

    def __init__(self, seed: Optional[int] = None):
        if seed is None:
            seed = seed_from_env()
        self.seed = seed
        self._rand = random.Random(seed)
        self._lock = threading.Lock()

    # Primitive helpers

    def _randint(self, low: int, high: int) -> int:
        with self._lock:
            return self._rand.randint(low, high)

    def _choice(self, seq):
        with self._lock:
            return self._rand.choice(seq)

    def random_string(self, length: int = 10, prefix: str = "") -> str:
        """Generate a random lowercase alphanumeric string."""
        chars = string.ascii_lowercase + string.digits
        with self._lock:
            random_part = "".join(self._rand.choice(chars) for _ in range(length))
        return f"{prefix}{random_part}" if prefix else random_part

    def password(self, length: int = DEFAULT_PASSWORD_LENGTH) -> str:
        """Password with at least one lower, upper, digit and special character."""
        pools = [string.ascii_lowercase, string.ascii_uppercase, string.digits, _SPECIALS]
        every = "".join(pools)
        with self._lock:
            chars = [self._rand.choice(pool) for pool in pools]
            chars += [self._rand.choice(every) for _ in range(max(0, length - len(chars)))]
            self._rand.shuffle(chars)
        return "".join(chars)

    def username(self) -> str:
        return f"{self._choice(_FIRST_NAMES).lower()}_{self.random_string(8)}"

    def email(self, username: Optional[str] = None) -> str:
        return f"{username or self.random_string(8, prefix='user')}@example.com"

    def full_name(self) -> str:
        return f"{self._choice(_FIRST_NAMES)} {self._choice(_LAST_NAMES)}"

    def word(self) -> str:
        return self._choice(_WORDS)

    def sentence(self, words: int = 5) -> str:
        text = " ".join(self.word() for _ in range(words))
        return text[:1].upper() + text[1:] + "."

    def paragraph(self, min_sentences: int = 3, max_sentences: int = 5) -> str:
        count = self._randint(min_sentences, max_sentences)
        return " ".join(self.sentence(self._randint(4, 10)) for _ in range(count))

    def image_url(self, width: int, height: int) -> str:
        return f"https://picsum.photos/seed/{self.random_string(6)}/{width}/{height}"

    # Auth

    def register_request(self) -> RegisterRequest:
        username = self.username()
        return RegisterRequest(
            username=username,
            email=self.email(username),
            password=self.password(DEFAULT_PASSWORD_LENGTH),
            full_name=self.full_name(),
            bio=self.sentence(10),
            avatar_url=self.image_url(AVATAR_SIZE, AVATAR_SIZE),
        )

    def login_request(self, login: str = "", password: str = "") -> LoginRequest:
        return LoginRequest(
            login=login or self.username(),
            password=password or self.password(DEFAULT_PASSWORD_LENGTH),
        )

    def update_password_request(self, old_password: str = "") -> UpdatePasswordRequest:
        return UpdatePasswordRequest(
            old_password=old_password or self.password(DEFAULT_PASSWORD_LENGTH),
            new_password=self.password(UPDATED_PASSWORD_LENGTH),
        )

    # Users

    def create_user_request(self) -> CreateUserRequest:
        return CreateUserRequest(**self.register_request().model_dump())

    def update_user_request(self, user_id: int) -> UpdateUserRequest:
        username = self.username()
        return UpdateUserRequest(
            id=user_id,
            username=username,
            email=self.email(username),
            full_name=self.full_name(),
            bio=self.sentence(10),
        )

    def update_avatar_request(self) -> UpdateAvatarRequest:
        return UpdateAvatarRequest(avatar_url=self.image_url(AVATAR_SIZE, AVATAR_SIZE))

    # Posts

    def media_item(self) -> MediaItemInput:
        return MediaItemInput(
            type=self._choice(MEDIA_TYPES),
            url=self.image_url(POST_IMAGE_WIDTH, POST_IMAGE_HEIGHT),
            position=self._randint(0, MAX_MEDIA_POSITION - 1),
        )

    def tags(self) -> List[str]:
        count = self._randint(MIN_TAG_ITEMS, MAX_TAG_ITEMS)
        # Distinct names so tag counts survive server-side de-duplication
        with self._lock:
            return self._rand.sample(_WORDS, count)

    def create_post_request(self) -> CreatePostRequest:
        media = [self.media_item() for _ in range(self._randint(0, MAX_MEDIA_ITEMS - 1))]
        return CreatePostRequest(
            title=self.sentence(5),
            content=self.paragraph(),
            media_items=media or None,
            tags=self.tags(),
        )

    def update_post_request(self) -> UpdatePostRequest:
        created = self.create_post_request()
        return UpdatePostRequest(**created.model_dump())

    # Notifications

    def send_notification_request(self, user_id: int, notification_type: Optional[str] = None) -> SendNotificationRequest:
        return SendNotificationRequest(
            user_id=user_id,
            type=notification_type or self._choice(NOTIFICATION_TYPES),
            payload={PAYLOAD_DATA_KEY: self.sentence(5)},
        )

    # Journeys

    def user_journey(self) -> UserJourney:
        """Inputs for one registration-to-notifications walk; notifications target user id 0 until known."""
        return UserJourney(
            registration=self.register_request(),
            posts=[self.create_post_request() for _ in range(JOURNEY_POST_COUNT)],
            notifications=[self.send_notification_request(0) for _ in range(JOURNEY_NOTIFICATION_COUNT)],
            other_users=[self.register_request() for _ in range(JOURNEY_OTHER_USERS_COUNT)],
        )


def seed_from_env() -> int:
    """Seed from ``TEST_SEED`` when it parses as an integer, else from the clock."""
    raw = os.getenv(SEED_ENV)
    if raw is not None:
        try:
            return int(raw)
        except ValueError:
            logger.warning(f"Ignoring non-integer {SEED_ENV}={raw!r}")
    return time.time_ns()


_generator: Optional[DataGenerator] = None
_generator_lock = threading.Lock()


def get_generator() -> DataGenerator:
    """Process-wide generator, seeded once."""
    global _generator
    with _generator_lock:
        if _generator is None:
            _generator = DataGenerator()
            logger.info(f"Test data seed: {_generator.seed} (set {SEED_ENV} to reproduce)")
        return _generator


def reset_generator() -> None:
    """Drop the process-wide generator (mainly for testing)"""
    global _generator
    with _generator_lock:
        _generator = None
