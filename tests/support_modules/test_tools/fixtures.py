from random import Random
from typing import Iterable, List, Optional

from voltypegen.types import TypeKind


class ScriptedRandom(Random):
    """Random source that replays scripted kind draws and integers before
    falling back to regular pseudo-random values."""

    def __init__(self, kinds: Iterable[TypeKind] = (), randints: Iterable[int] = (),
                 coins: Iterable[int] = (), seed: int = 0) -> None:
        super().__init__(seed)
        self.kinds: List[TypeKind] = list(kinds)
        self.randints: List[int] = list(randints)
        self.coins: List[int] = list(coins)
        self.kind_draws: List[TypeKind] = []

    def choice(self, seq):
        if seq and isinstance(seq[0], TypeKind):
            kind = self.kinds.pop(0) if self.kinds else super().choice(seq)
            self.kind_draws.append(kind)
            return kind
        return super().choice(seq)

    def randint(self, a, b):
        if self.randints:
            return self.randints.pop(0)
        return super().randint(a, b)

    def randrange(self, start, stop=None, step=1):
        if stop is None and start == 2 and self.coins:
            return self.coins.pop(0)
        if stop is None:
            return super().randrange(start)
        return super().randrange(start, stop, step)


class FuzzingConfig:
    def __init__(
            self, *,
            num_types: int = 10000,
            type_seed: int = 1,
            parent: Optional[str] = None,
            max_depth: Optional[int] = None,
            verbose: bool = False
        ) -> None:
        self.num_types: int = num_types
        self.type_seed: int = type_seed
        self.parent_kind: Optional[TypeKind] = TypeKind.Array if parent == "array" else None
        self.max_depth: Optional[int] = max_depth
        self.verbose: bool = verbose
