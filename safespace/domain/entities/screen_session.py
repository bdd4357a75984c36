from __future__ import annotations

from dataclasses import dataclass, field
from uuid import uuid4


@dataclass
class ScreenSession:
    """Lifetime marker for a mounted screen; late async results are dropped once closed."""

    session_id: str = field(default_factory=lambda: uuid4().hex)
    active: bool = True

    def close(self) -> None:
        self.active = False
