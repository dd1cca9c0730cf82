from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Any, Dict


@dataclass
class LouvainConfig:
    precision: float = 0.01            # minimum modularity gain for another local pass
    parallelism: int = 4               # independent attempts per level
    verbose: bool = True               # print level banners when no observer is given
    seed: int = 0                      # seeds the visiting order of attempts 1..parallelism-1

    def __post_init__(self):
        if int(self.parallelism) < 1:
            raise ValueError(f"parallelism must be >= 1, got {self.parallelism}")
        if float(self.precision) < 0:
            raise ValueError(f"precision must be non-negative, got {self.precision}")
        self.parallelism = int(self.parallelism)
        self.precision = float(self.precision)
        self.seed = int(self.seed)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
