"""Random nickname generation for users who register without one."""

import secrets

ADJECTIVES = (
    "Brave", "Calm", "Clever", "Eager", "Gentle", "Happy", "Jolly",
    "Kind", "Lucky", "Mighty", "Quiet", "Swift", "Witty", "Bright",
)

NOUNS = (
    "Badger", "Falcon", "Fox", "Heron", "Koala", "Lynx", "Otter",
    "Panda", "Raven", "Seal", "Tiger", "Whale", "Wolf", "Yak",
)


def generate_nickname() -> str:
    """Return e.g. "SwiftOtter0427"."""
    return "{}{}{:04d}".format(
        secrets.choice(ADJECTIVES),
        secrets.choice(NOUNS),
        secrets.randbelow(10000),
    )
