"""Rules layer for the Space Fortress tactical card battle.

Everything here is pure and deterministic:

* Immutable state records (see :mod:`models`) and the enumerations they use.
* The command and event schemas with their JSON codecs.
* :func:`decider.decide`, which validates a command against the current
  state and returns the events it produces.
* :func:`projector.fold`, which applies one event to a state.

Persistence and the async command cycle live in :mod:`fortress.repository`
and :mod:`fortress.services`.
"""

from . import (
    abilities,
    catalog,
    combat,
    commands,
    decider,
    enums,
    errors,
    events,
    models,
    policy,
    projector,
    rules_config,
    tactical,
    turns,
    views,
)

__all__ = [
    "abilities",
    "catalog",
    "combat",
    "commands",
    "decider",
    "enums",
    "errors",
    "events",
    "models",
    "policy",
    "projector",
    "rules_config",
    "tactical",
    "turns",
    "views",
]
