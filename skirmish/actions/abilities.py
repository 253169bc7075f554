"""
Support abilities of the companion: heal, protect and taunt.
"""

from typing import Any

from pydantic import BaseModel, Field

from skirmish.core.constants import SupportKind


class SupportAbility(BaseModel):
    """A non-spell support capability of a companion."""

    name: str = Field(
        description="Name of the ability.",
    )
    kind: SupportKind = Field(
        description="What the ability does.",
    )
    dice: str | None = Field(
        default=None,
        description="Healing descriptor, required for heal abilities.",
    )
    duration: int = Field(
        default=1,
        ge=1,
        description="Number of the user's turns the applied effect lasts.",
    )
    uses: int = Field(
        default=-1,
        ge=-1,
        description="Remaining uses in this encounter (-1 for unlimited).",
    )
    range: int = Field(
        default=1,
        ge=1,
        description="Range of the ability in grid squares.",
    )

    def model_post_init(self, _: Any) -> None:
        """Validates fields after model initialization."""
        if self.kind == SupportKind.HEAL and not self.dice:
            raise ValueError(f"Heal ability {self.name} needs a dice descriptor")

    def is_available(self) -> bool:
        """Returns True while the ability has uses left."""
        return self.uses != 0

    def spend(self) -> None:
        """Consumes one use, unless the ability is unlimited."""
        if self.uses > 0:
            self.uses -= 1
