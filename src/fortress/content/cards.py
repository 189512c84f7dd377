"""Card and opponent-fleet content.

Five factions supply the player-acquirable ships; scavengers, pirates and
the Ironveil security fleet only ever appear as opponents.
"""

from __future__ import annotations

from fortress.domain.catalog import FleetDesign, OpponentFleet
from fortress.domain.enums import (
    AbilityTrigger,
    ConditionType,
    EffectType,
    LaneBypass,
    StatusEffectType,
    TargetType,
)
from fortress.domain.models import AbilityEffect, CardAbility, EffectCondition, ShipProfile


def _status(status: StatusEffectType, duration: int, stacks: int = 1) -> AbilityEffect:
    return AbilityEffect(
        type=EffectType.APPLY_STATUS, status=status, amount=stacks, duration=duration
    )


def _ship(
    card_id: str,
    name: str,
    faction: str,
    attack: int,
    defense: int,
    hull: int,
    agility: int,
    energy_cost: int,
    *abilities: CardAbility,
) -> ShipProfile:
    return ShipProfile(
        card_id=card_id,
        name=name,
        faction=faction,
        attack=attack,
        defense=defense,
        hull=hull,
        agility=agility,
        energy_cost=energy_cost,
        abilities=abilities,
    )


# --- Ironveil Syndicate: siege vessels -------------------------------------------

IRONVEIL = (
    _ship(
        "ironveil_hammerhead", "Hammerhead", "ironveil", 5, 3, 6, 2, 3,
        CardAbility(
            "hammerhead_breach", "Hull Breach", AbilityTrigger.ON_ATTACK, TargetType.ENEMY,
            (_status(StatusEffectType.MARKED, duration=2),),
            description="Attacking reduces the target's defense by 1 for 2 turns.",
        ),
    ),
    _ship(
        "ironveil_creditor", "The Creditor", "ironveil", 6, 2, 5, 2, 3,
        CardAbility(
            "creditor_collect", "Collect Debt", AbilityTrigger.ON_DESTROYED, TargetType.ENEMY,
            (AbilityEffect(EffectType.DEAL_DAMAGE, amount=3),),
            description="When destroyed, deals 3 damage to the opposing ship.",
        ),
    ),
    _ship(
        "ironveil_ironclad", "Ironclad", "ironveil", 4, 4, 7, 2, 3,
        CardAbility(
            "ironclad_fortify", "Fortify", AbilityTrigger.ACTIVATED, TargetType.SELF,
            (_status(StatusEffectType.SHIELDED, duration=1, stacks=2),),
            energy_cost=1, cooldown=2,
            description="Spend 1 energy to gain +2 defense for 1 turn.",
        ),
    ),
    _ship(
        "ironveil_profit_margin", "Profit Margin", "ironveil", 5, 3, 6, 1, 3,
        CardAbility(
            "profit_compound", "Compound Interest", AbilityTrigger.END_TURN, TargetType.SELF,
            (_status(StatusEffectType.ENERGIZED, duration=99),),
            description="At end of turn, gains +1 attack.",
        ),
    ),
    _ship(
        "ironveil_siege_lance", "Siege Lance", "ironveil", 4, 2, 5, 1, 4,
        CardAbility(
            "siege_lance_long_gun", "Long Gun", AbilityTrigger.PASSIVE, TargetType.FLAGSHIP,
            lane_bypass=LaneBypass.FLAGSHIP_DIRECT,
            description="May fire on the enemy flagship from any lane.",
        ),
    ),
)

# --- Ashfall Remnants: interceptors ----------------------------------------------

ASHFALL = (
    _ship(
        "ashfall_phoenix", "Phoenix Rising", "ashfall", 4, 1, 4, 5, 2,
        CardAbility(
            "phoenix_rebirth", "Rebirth", AbilityTrigger.ON_DESTROYED, TargetType.FLAGSHIP,
            (AbilityEffect(EffectType.REPAIR_FLAGSHIP, amount=3),),
            description="When destroyed, repairs your flagship by 3.",
        ),
    ),
    _ship(
        "ashfall_redhawk", "Redhawk", "ashfall", 4, 2, 4, 4, 2,
        CardAbility(
            "redhawk_strafe", "Strafing Run", AbilityTrigger.ON_ATTACK, TargetType.ADJACENT,
            (AbilityEffect(EffectType.DEAL_DAMAGE, amount=1),),
            description="Attacks also deal 1 damage to enemies beside the target lane.",
        ),
    ),
    _ship(
        "ashfall_desperado", "Desperado", "ashfall", 5, 0, 3, 5, 2,
        CardAbility(
            "desperado_reckless", "Reckless Assault", AbilityTrigger.PASSIVE, TargetType.SELF,
            (
                AbilityEffect(
                    EffectType.BOOST_ATTACK,
                    amount=2,
                    condition=EffectCondition(ConditionType.HULL_BELOW, 50),
                ),
            ),
            description="Below 50% hull, gains +2 attack.",
        ),
    ),
    _ship(
        "ashfall_ember", "Ember", "ashfall", 3, 2, 4, 4, 2,
        CardAbility(
            "ember_spread", "Spreading Flames", AbilityTrigger.START_TURN, TargetType.ALL_ENEMIES,
            (AbilityEffect(EffectType.DEAL_DAMAGE, amount=1),),
            description="At start of turn, deals 1 damage to all enemies.",
        ),
    ),
    _ship(
        "ashfall_firebrand", "Firebrand", "ashfall", 3, 1, 4, 4, 2,
        CardAbility(
            "firebrand_ignite", "Ignite", AbilityTrigger.ON_ATTACK, TargetType.ENEMY,
            (_status(StatusEffectType.BURNING, duration=2),),
            description="Attacking sets the target burning for 2 turns.",
        ),
    ),
)

# --- Meridian Accord: balanced traders -------------------------------------------

MERIDIAN = (
    _ship(
        "meridian_negotiator", "Negotiator", "meridian", 4, 3, 5, 3, 2,
        CardAbility(
            "negotiator_diplomacy", "Diplomatic Immunity", AbilityTrigger.ON_DEPLOY,
            TargetType.SELF,
            (_status(StatusEffectType.SHIELDED, duration=2, stacks=3),),
            description="On deploy, gains +3 defense for 2 turns.",
        ),
    ),
    _ship(
        "meridian_broker", "Deal Broker", "meridian", 3, 3, 5, 4, 2,
        CardAbility(
            "broker_trade", "Fair Trade", AbilityTrigger.ACTIVATED, TargetType.SELF,
            (AbilityEffect(EffectType.DRAW_CARD, amount=1),),
            energy_cost=1, cooldown=1,
            description="Spend 1 energy to draw a card.",
        ),
    ),
    _ship(
        "meridian_arbiter", "Arbiter", "meridian", 4, 2, 5, 4, 2,
        CardAbility(
            "arbiter_enforce", "Enforce Order", AbilityTrigger.ACTIVATED, TargetType.ENEMY,
            (_status(StatusEffectType.STUNNED, duration=1),),
            energy_cost=2, cooldown=2, lane_bypass=LaneBypass.CROSS_LANE,
            description="Spend 2 energy to stun any enemy ship for 1 turn.",
        ),
    ),
    _ship(
        "meridian_courier", "Swift Courier", "meridian", 3, 2, 4, 5, 1,
        CardAbility(
            "courier_swift", "Swift Delivery", AbilityTrigger.ON_DEPLOY, TargetType.SELF,
            (AbilityEffect(EffectType.DRAW_CARD, amount=1),),
            description="On deploy, draw a card.",
        ),
    ),
    _ship(
        "meridian_interdictor", "Interdictor", "meridian", 3, 3, 5, 3, 3,
        CardAbility(
            "interdictor_vector", "Free Vector", AbilityTrigger.PASSIVE, TargetType.ENEMY,
            lane_bypass=LaneBypass.CROSS_LANE,
            description="May attack ships in any lane.",
        ),
    ),
)

# --- Void Wardens: armored sentinels ---------------------------------------------

VOID_WARDENS = (
    _ship(
        "void_bulwark", "Bulwark", "void_wardens", 2, 5, 8, 3, 3,
        CardAbility(
            "bulwark_protect", "Shield Wall", AbilityTrigger.ON_DEPLOY, TargetType.SELF,
            (_status(StatusEffectType.TAUNTING, duration=3),),
            description="On deploy, draws all enemy fire for 3 turns.",
        ),
    ),
    _ship(
        "void_sentinel", "Sentinel", "void_wardens", 3, 4, 7, 3, 3,
        CardAbility(
            "sentinel_vigilant", "Vigilant Watch", AbilityTrigger.ON_DEFEND, TargetType.ENEMY,
            (AbilityEffect(EffectType.DEAL_DAMAGE, amount=2),),
            description="When attacked, deals 2 damage to the attacker.",
        ),
    ),
    _ship(
        "void_warden_prime", "Warden Prime", "void_wardens", 3, 5, 8, 2, 4,
        CardAbility(
            "warden_prime_rally", "Rally the Fleet", AbilityTrigger.ACTIVATED,
            TargetType.ALL_ALLIES,
            (AbilityEffect(EffectType.REPAIR, amount=2),),
            energy_cost=2, cooldown=3,
            description="Spend 2 energy to repair all allies by 2.",
        ),
    ),
    _ship(
        "void_beacon_keeper", "Beacon Keeper", "void_wardens", 2, 4, 6, 4, 2,
        CardAbility(
            "keeper_guidance", "Guiding Light", AbilityTrigger.START_TURN, TargetType.ALLY,
            (_status(StatusEffectType.SHIELDED, duration=1),),
            description="At start of turn, an ally gains +1 defense for 1 turn.",
        ),
    ),
)

# --- Sundered Oath: glass cannons ------------------------------------------------

SUNDERED_OATH = (
    _ship(
        "sundered_oathbreaker", "Oathbreaker", "sundered_oath", 6, 1, 4, 3, 3,
        CardAbility(
            "oathbreaker_betray", "Broken Vow", AbilityTrigger.ON_ATTACK, TargetType.ENEMY,
            (_status(StatusEffectType.STUNNED, duration=1),),
            description="Attacking stuns the target for 1 turn.",
        ),
    ),
    _ship(
        "sundered_betrayer", "Betrayer's Edge", "sundered_oath", 6, 0, 3, 4, 2,
        CardAbility(
            "betrayer_backstab", "Backstab", AbilityTrigger.ON_ATTACK, TargetType.ENEMY,
            (
                AbilityEffect(
                    EffectType.DEAL_DAMAGE,
                    amount=3,
                    condition=EffectCondition(ConditionType.FIRST_CARD_PLAYED),
                ),
            ),
            description="If at most one card was played this turn, deals 3 extra damage.",
        ),
    ),
    _ship(
        "sundered_exile", "Exile", "sundered_oath", 5, 1, 4, 4, 2,
        CardAbility(
            "exile_shadow_strike", "Shadow Strike", AbilityTrigger.ACTIVATED,
            TargetType.FLAGSHIP,
            (AbilityEffect(EffectType.DAMAGE_FLAGSHIP, amount=2),),
            energy_cost=2, cooldown=2, lane_bypass=LaneBypass.FLAGSHIP_DIRECT,
            description="Spend 2 energy to deal 2 damage to the enemy flagship.",
        ),
    ),
    _ship(
        "sundered_ghost_ship", "Ghost Ship", "sundered_oath", 5, 2, 5, 3, 3,
        CardAbility(
            "ghost_phase", "Phase Through", AbilityTrigger.ON_DEFEND, TargetType.SELF,
            (_status(StatusEffectType.SHIELDED, duration=1, stacks=3),),
            description="When attacked, gains +3 defense for 1 turn.",
        ),
    ),
    _ship(
        "sundered_powder_keg", "Powder Keg", "sundered_oath", 7, 1, 5, 2, 2,
        CardAbility(
            "powder_keg_fuse", "Short Fuse", AbilityTrigger.ON_DEPLOY, TargetType.SELF,
            (_status(StatusEffectType.UNSTABLE, duration=2),),
            description="On deploy, becomes unstable: takes 2 damage when the fuse runs out.",
        ),
    ),
)

# --- Starter vessels -------------------------------------------------------------

STARTERS = (
    _ship(
        "starter_salvager", "Salvager", "meridian", 3, 2, 5, 3, 2,
        CardAbility(
            "salvager_scrap", "Salvage Parts", AbilityTrigger.ON_DESTROYED, TargetType.SELF,
            (AbilityEffect(EffectType.ENERGY_GAIN, amount=1),),
            description="When destroyed, restores 1 energy.",
        ),
    ),
    _ship(
        "starter_runner", "System Runner", "meridian", 3, 1, 4, 4, 1,
        CardAbility(
            "runner_evade", "Evasive Maneuvers", AbilityTrigger.ON_DEFEND, TargetType.SELF,
            (_status(StatusEffectType.SHIELDED, duration=1, stacks=2),),
            description="When attacked, gains +2 defense for 1 turn.",
        ),
    ),
    _ship(
        "starter_freighter", "Armed Freighter", "meridian", 2, 3, 6, 3, 2,
        CardAbility(
            "freighter_cargo", "Cargo Hold", AbilityTrigger.ON_DEPLOY, TargetType.SELF,
            (AbilityEffect(EffectType.DRAW_CARD, amount=1),),
            description="On deploy, draw a card.",
        ),
    ),
    _ship(
        "starter_scout", "Scout", "meridian", 3, 2, 4, 4, 1,
        CardAbility(
            "scout_recon", "Reconnaissance", AbilityTrigger.ON_DEPLOY, TargetType.ENEMY,
            (_status(StatusEffectType.MARKED, duration=2),),
            description="On deploy, reduces the opposing ship's defense by 1 for 2 turns.",
        ),
    ),
    _ship("starter_corvette", "Corvette", "meridian", 3, 2, 5, 3, 2),
)

PLAYER_CARDS: tuple[ShipProfile, ...] = (
    *IRONVEIL,
    *ASHFALL,
    *MERIDIAN,
    *VOID_WARDENS,
    *SUNDERED_OATH,
    *STARTERS,
)

STARTER_CARD_IDS: tuple[str, ...] = (
    "starter_salvager",
    "starter_runner",
    "starter_freighter",
    "starter_scout",
    "starter_corvette",
    "meridian_negotiator",
    "meridian_courier",
    "void_sentinel",
    "ashfall_redhawk",
    "ironveil_ironclad",
)

# --- Opponent fleets -------------------------------------------------------------

SCAVENGER_DESIGNS = (
    FleetDesign(
        "scav_rustbucket", "Rustbucket", 4, 1, 4, 3, 2, weight=3,
        abilities=(
            CardAbility(
                "rustbucket_fall_apart", "Falling Apart", AbilityTrigger.END_TURN,
                TargetType.SELF, (AbilityEffect(EffectType.DEAL_DAMAGE, amount=1),),
                description="At end of turn, takes 1 damage.",
            ),
        ),
    ),
    FleetDesign(
        "scav_wrecker", "Wrecker", 5, 2, 5, 2, 3, weight=2,
        abilities=(
            CardAbility(
                "wrecker_salvage", "Strip for Parts", AbilityTrigger.ON_ATTACK, TargetType.ENEMY,
                (_status(StatusEffectType.MARKED, duration=99),),
                description="Attacking permanently reduces the target's defense by 1.",
            ),
        ),
    ),
    FleetDesign(
        "scav_vulture", "Vulture", 3, 1, 3, 4, 1, weight=2,
        abilities=(
            CardAbility(
                "vulture_feast", "Feast on Wreckage", AbilityTrigger.END_TURN, TargetType.SELF,
                (
                    AbilityEffect(
                        EffectType.REPAIR,
                        amount=2,
                        condition=EffectCondition(ConditionType.SHIP_DESTROYED_THIS_TURN),
                    ),
                ),
                description="At end of turn, repairs 2 if a ship was destroyed this turn.",
            ),
        ),
    ),
    FleetDesign(
        "scav_junker", "Junker", 4, 3, 5, 2, 2, weight=2,
        abilities=(
            CardAbility(
                "junker_armor", "Jury-Rigged Armor", AbilityTrigger.ON_DEPLOY, TargetType.SELF,
                (_status(StatusEffectType.SHIELDED, duration=2, stacks=2),),
                description="On deploy, gains +2 defense for 2 turns.",
            ),
        ),
    ),
    FleetDesign(
        "scav_void_rat", "Void Rat", 3, 0, 2, 5, 1, weight=2,
        abilities=(
            CardAbility(
                "rat_scurry", "Scurry Away", AbilityTrigger.ON_DEFEND, TargetType.SELF,
                (_status(StatusEffectType.SHIELDED, duration=1, stacks=3),),
                description="When attacked, gains +3 defense for 1 turn.",
            ),
        ),
    ),
    FleetDesign("scav_barge", "Armed Barge", 2, 4, 7, 1, 2, weight=1),
)

PIRATE_DESIGNS = (
    FleetDesign(
        "pirate_raider", "Raider", 4, 2, 4, 4, 2, weight=3,
        abilities=(
            CardAbility(
                "raider_strike", "Hit and Run", AbilityTrigger.ON_ATTACK, TargetType.SELF,
                (_status(StatusEffectType.SHIELDED, duration=1, stacks=2),),
                description="After attacking, gains +2 defense for 1 turn.",
            ),
        ),
    ),
    FleetDesign("pirate_marauder", "Marauder", 5, 3, 6, 2, 3, weight=2),
    FleetDesign(
        "pirate_corsair", "Corsair Gunship", 5, 3, 5, 2, 3, weight=2,
        abilities=(
            CardAbility(
                "corsair_broadside", "Broadside", AbilityTrigger.ON_ATTACK, TargetType.ADJACENT,
                (AbilityEffect(EffectType.DEAL_DAMAGE, amount=1),),
                description="Attacks also hit enemies beside the target lane for 1.",
            ),
        ),
    ),
    FleetDesign(
        "pirate_hunter", "Bounty Hunter", 4, 3, 5, 3, 3, weight=2,
        abilities=(
            CardAbility(
                "hunter_tracking", "Tracking Shot", AbilityTrigger.PASSIVE, TargetType.ENEMY,
                lane_bypass=LaneBypass.CROSS_LANE,
                description="May attack ships in any lane.",
            ),
        ),
    ),
    FleetDesign(
        "pirate_bomber", "Pirate Bomber", 6, 1, 4, 2, 3, weight=1,
        abilities=(
            CardAbility(
                "bomber_payload", "Payload Run", AbilityTrigger.PASSIVE, TargetType.FLAGSHIP,
                lane_bypass=LaneBypass.FLAGSHIP_DIRECT,
                description="May bomb the enemy flagship from any lane.",
            ),
        ),
    ),
)

IRONVEIL_SECURITY_DESIGNS = (
    FleetDesign("iv_mining_barge", "Mining Barge Retrofit", 5, 3, 6, 1, 3, weight=2),
    FleetDesign("iv_extraction_gun", "Extraction Gunship", 4, 3, 6, 2, 3, weight=2),
    FleetDesign("iv_security_corvette", "Security Corvette", 3, 2, 5, 4, 2, weight=2),
    FleetDesign(
        "iv_heavy_hauler", "Heavy Hauler", 2, 5, 8, 2, 3, weight=1,
        abilities=(
            CardAbility(
                "hauler_bulk", "Bulk Shielding", AbilityTrigger.ON_DEPLOY, TargetType.SELF,
                (_status(StatusEffectType.TAUNTING, duration=2),),
                description="On deploy, draws all enemy fire for 2 turns.",
            ),
        ),
    ),
    FleetDesign("iv_siege_platform", "Siege Platform", 6, 4, 7, 1, 4, weight=1),
)

OPPONENT_FLEETS: tuple[OpponentFleet, ...] = (
    OpponentFleet(
        "scavengers", "Scavenger Swarm", "scavengers", SCAVENGER_DESIGNS,
        "A ragtag group of scavengers in salvaged ships",
    ),
    OpponentFleet(
        "pirates", "Pirate Raiders", "pirates", PIRATE_DESIGNS,
        "Professional pirates with coordinated tactics",
    ),
    OpponentFleet(
        "ironveil_security", "Ironveil Security Fleet", "ironveil", IRONVEIL_SECURITY_DESIGNS,
        "Corporate security forces with heavy siege weapons",
    ),
)
