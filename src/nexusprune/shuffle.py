from __future__ import annotations

import random
from typing import MutableSequence


def shuffle(items: MutableSequence[str], rng: random.Random | None = None) -> None:
    """Fisher-Yates shuffle of ``items`` in place.

    The random source is never seeded here. Callers seed the module-level
    generator once per process (or pass ``rng``) before the first call.
    """

    source = rng if rng is not None else random
    for index in range(len(items)):
        swap = source.randrange(index + 1)
        items[index], items[swap] = items[swap], items[index]


__all__ = ["shuffle"]
