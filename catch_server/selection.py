"""Random picks. Defaults to the OS CSPRNG so outcomes can't be predicted or replayed."""

import secrets

from catch_server.errors import EmptySequenceError

_system_random = secrets.SystemRandom()


def uniform(items, rng=None):
    """Pick one element, each with probability 1/len."""
    if not items:
        raise EmptySequenceError("Nothing to pick from")
    rng = rng or _system_random
    return items[rng.randrange(len(items))]


def is_touchdown(text):
    return "touchdown" in str(text).lower()


def weighted_reward_pick(items, is_reward=is_touchdown, reward_rate=0.22, rng=None):
    """Return a reward entry with probability reward_rate, otherwise a non-reward one.

    Natural frequency of reward entries in `items` is ignored; only the rate
    decides which pool is drawn from. If the chosen pool is empty the other
    one is used.
    """
    reward_pool = [x for x in items if is_reward(x)]
    other_pool = [x for x in items if not is_reward(x)]
    if not reward_pool and not other_pool:
        raise EmptySequenceError("Nothing to pick from")

    rng = rng or _system_random
    roll = rng.random()
    pool = reward_pool if roll < reward_rate else other_pool
    return uniform(pool or reward_pool or other_pool, rng)
