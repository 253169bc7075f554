"""
Actions system module for the combat engine.

This module contains the attack, spell and support ability definitions and
the resolvers that turn them into action results: hit or miss, damage,
healing, applied effects and narrative messages. Resolvers never mutate the
combatants they are given.
"""
