"""
Demo entry point for the combat engine.

Runs one encounter on the bundled data with the player on autopilot: on each
of its turns the player attacks the nearest living enemy with its first
attack. The companion and the enemies act on their own. Pacing delays run on
a virtual clock, so the whole fight prints at once.

Usage:
    python -m skirmish.main [settings.json]
"""

import logging
import sys
from pathlib import Path

from skirmish.actions.player_action import PlayerAction
from skirmish.actions.abilities import SupportAbility
from skirmish.character import Companion, InMemoryCharacterStore, Player, Spellcasting
from skirmish.combat import (
    CombatManager,
    ConsoleNarrativeSink,
    EncounterSpec,
    EnemyGroup,
    ManualScheduler,
)
from skirmish.combat.companion_ai import nearest_enemy
from skirmish.combat.state import CombatState
from skirmish.core.constants import ActionType, CombatPhase, SupportKind
from skirmish.core.content import ContentRepository
from skirmish.core.dice_parser import DiceRoller
from skirmish.core.logging import setup_logging
from skirmish.core.settings import load_settings
from skirmish.core.utils import cprint, crule, make_bar


def build_party() -> InMemoryCharacterStore:
    """Creates the demo player and companion."""
    player = Player(
        name="Aria",
        level=3,
        max_hp=28,
        armor_class=16,
        stats={
            "strength": 16,
            "dexterity": 12,
            "constitution": 14,
            "intelligence": 8,
            "wisdom": 10,
            "charisma": 12,
        },
        equipment={"main_hand": "longsword"},
    )
    companion = Companion(
        name="Lyra",
        level=3,
        max_hp=21,
        armor_class=13,
        stats={
            "strength": 8,
            "dexterity": 14,
            "constitution": 12,
            "intelligence": 16,
            "wisdom": 14,
            "charisma": 10,
        },
        equipment={"main_hand": "quarterstaff"},
        spellcasting=Spellcasting(
            ability="intelligence",
            slots={1: 4, 2: 2},
            known=["Magic Missile", "Cure Wounds"],
            prepared=["Magic Missile", "Cure Wounds"],
            cantrips=["Fire Bolt"],
        ),
        support_abilities=[
            SupportAbility(name="Second Wind", kind=SupportKind.HEAL, dice="1d10+2", uses=1),
            SupportAbility(name="Shield Ally", kind=SupportKind.PROTECT, duration=1),
            SupportAbility(name="Provoke", kind=SupportKind.TAUNT, duration=1, range=3),
        ],
    )
    return InMemoryCharacterStore(player=player, companion=companion)


def autopilot(state: CombatState) -> PlayerAction | None:
    """Attacks the nearest living enemy with the first attack."""
    target = nearest_enemy(state.player, state)
    if target is None or not state.player.attacks:
        return None
    return PlayerAction(
        type=ActionType.ATTACK,
        name=state.player.attacks[0].name,
        target_ids=[target.id],
    )


def print_party(store: InMemoryCharacterStore) -> None:
    for member in (store.player, store.companion):
        if member is None:
            continue
        bar = make_bar(member.hp, member.max_hp, color=member.kind.color)
        cprint(f"    {member.kind.emoji} {member.name:<10} {bar} {member.hp}/{member.max_hp}")


def main(argv: list[str]) -> int:
    setup_logging(logging.WARNING)
    settings = load_settings(Path(argv[0]) if argv else None)

    crule("Skirmish", style="bold green")
    repository = ContentRepository.from_directory()
    store = build_party()
    encounter = EncounterSpec(
        groups=[EnemyGroup(type="goblin", count=2), EnemyGroup(type="wolf")]
    )
    scheduler = ManualScheduler()
    manager = CombatManager.from_store(
        store,
        encounter,
        repository,
        scheduler=scheduler,
        sink=ConsoleNarrativeSink(),
        dice=DiceRoller(settings.seed),
        settings=settings,
    )

    manager.start()
    while not manager.is_over:
        acted = False
        if manager.phase == CombatPhase.PLAYER_TURN:
            acted = manager.submit_player_action(autopilot(manager.state)).success
        if scheduler.run_all() == 0 and not acted:
            break

    crule("Party", style="bold green")
    print_party(store)
    cprint(f"\n    Outcome: [bold]{manager.outcome}[/] after {manager.state.round_number} rounds.")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
