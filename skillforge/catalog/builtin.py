"""
Built-in Catalog

A hand-authored subset of the common mechanics, targeters, triggers and
conditions. It is the default when no catalog file is configured and the
fixture the tests run against. Deployments that need the full name list load
their own catalog file instead (see load_catalog).
"""

from functools import lru_cache

from .model import (
    AttributeDefinition,
    AttributeType,
    Catalog,
    MechanicDefinition,
    NamedEntry,
)

NUMBER = AttributeType.NUMBER
INTEGER = AttributeType.INTEGER
BOOLEAN = AttributeType.BOOLEAN
TEXT = AttributeType.TEXT


@lru_cache(maxsize=1)
def default_catalog() -> Catalog:
    """
    Create the built-in catalog.

    Cached: the catalog is immutable, so every caller shares one instance.
    """
    return Catalog(
        mechanics=_define_mechanics(),
        targeters=_define_targeters(),
        triggers=_define_triggers(),
        conditions=_define_conditions(),
        version="builtin-1",
    )


def _define_mechanics() -> tuple[MechanicDefinition, ...]:
    """Define the mechanics with their attribute schemas."""
    return (
        # Damage
        MechanicDefinition(
            name="damage",
            aliases=("d",),
            category="damage",
            attributes=(
                AttributeDefinition("amount", ("a",), NUMBER, required=True, min_value=0),
                AttributeDefinition("ignorearmor", ("ia", "i"), BOOLEAN),
                AttributeDefinition("preventknockback", ("pkb", "pk"), BOOLEAN),
                AttributeDefinition("preventimmunity", ("pi",), BOOLEAN),
                AttributeDefinition("damagecause", ("cause", "type", "t"), TEXT),
                AttributeDefinition("element", ("e",), TEXT),
            ),
            description="Deals damage to the target entity.",
        ),
        MechanicDefinition(
            name="basedamage",
            category="damage",
            attributes=(AttributeDefinition("multiplier", ("m",), NUMBER, min_value=0),),
            description="Deals damage based on the mob's damage value.",
        ),
        # Healing
        MechanicDefinition(
            name="heal",
            category="heal",
            attributes=(
                AttributeDefinition("amount", ("a",), NUMBER, required=True, min_value=0),
                AttributeDefinition("overheal", ("oh",), BOOLEAN),
            ),
            description="Heals the target.",
        ),
        MechanicDefinition(
            name="healpercent",
            aliases=("percentheal",),
            category="heal",
            attributes=(
                AttributeDefinition("multiplier", ("m",), NUMBER, required=True,
                                    min_value=0, max_value=1),
            ),
        ),
        # Effects
        MechanicDefinition(
            name="effect:particles",
            aliases=("particles", "e:p", "effect:particle", "e:particles"),
            category="effects",
            attributes=(
                AttributeDefinition("particle", ("p",), TEXT),
                AttributeDefinition("amount", ("count", "a"), INTEGER, min_value=0),
                AttributeDefinition("speed", ("s",), NUMBER),
                AttributeDefinition("hspread", ("hs",), NUMBER),
                AttributeDefinition("vspread", ("vs", "ys"), NUMBER),
                AttributeDefinition("yoffset", ("y",), NUMBER),
            ),
        ),
        MechanicDefinition(
            name="effect:sound",
            aliases=("sound", "e:s"),
            category="effects",
            attributes=(
                AttributeDefinition("sound", ("s",), TEXT, required=True),
                AttributeDefinition("volume", ("v",), NUMBER, min_value=0),
                AttributeDefinition("pitch", ("p",), NUMBER, min_value=0, max_value=2),
            ),
        ),
        MechanicDefinition(
            name="effect:lightning",
            aliases=("lightning", "e:lightning"),
            category="effects",
        ),
        MechanicDefinition(
            name="potion",
            category="effects",
            attributes=(
                AttributeDefinition("type", ("t",), TEXT, required=True),
                AttributeDefinition("duration", ("d",), INTEGER, min_value=0),
                AttributeDefinition("level", ("l", "lvl"), INTEGER, min_value=0),
            ),
        ),
        MechanicDefinition(
            name="ignite",
            category="effects",
            attributes=(AttributeDefinition("ticks", ("t",), INTEGER, min_value=0),),
        ),
        # Movement
        MechanicDefinition(
            name="throw",
            category="movement",
            attributes=(
                AttributeDefinition("velocity", ("v",), NUMBER),
                AttributeDefinition("velocityy", ("vy",), NUMBER),
            ),
        ),
        MechanicDefinition(
            name="leap",
            category="movement",
            attributes=(AttributeDefinition("velocity", ("v",), NUMBER),),
        ),
        MechanicDefinition(
            name="teleport",
            aliases=("tp",),
            category="movement",
            attributes=(AttributeDefinition("spreadh", ("sh",), NUMBER),),
        ),
        # Communication
        MechanicDefinition(
            name="message",
            aliases=("m", "msg"),
            category="utility",
            attributes=(AttributeDefinition("message", ("m", "msg"), TEXT, required=True),),
        ),
        MechanicDefinition(
            name="command",
            aliases=("cmd",),
            category="utility",
            attributes=(
                AttributeDefinition("command", ("c", "cmd"), TEXT, required=True),
                AttributeDefinition("asop", ("op",), BOOLEAN),
            ),
        ),
        # Control flow / meta
        MechanicDefinition(
            name="skill",
            aliases=("metaskill", "meta"),
            category="control",
            attributes=(
                AttributeDefinition("skill", ("s", "meta", "m", "mechanics", "$", "()"), TEXT,
                                    required=True),
                AttributeDefinition("forcesync", ("sync",), BOOLEAN),
            ),
        ),
        MechanicDefinition(
            name="delay",
            category="control",
            attributes=(AttributeDefinition("ticks", ("t",), INTEGER, min_value=0),),
        ),
        MechanicDefinition(
            name="cancelevent",
            aliases=("cancel",),
            category="control",
        ),
        MechanicDefinition(
            name="remove",
            category="control",
            attributes=(AttributeDefinition("delay", ("d",), INTEGER, min_value=0),),
        ),
        MechanicDefinition(name="suicide", category="control"),
        MechanicDefinition(
            name="setvariable",
            aliases=("setvar",),
            category="control",
            attributes=(
                AttributeDefinition("variable", ("var", "name", "key", "k"), TEXT, required=True),
                AttributeDefinition("value", ("val", "v"), TEXT),
                AttributeDefinition("type", ("t",), AttributeType.CHOICE,
                                    choices=("INTEGER", "FLOAT", "STRING", "SET", "MAP",
                                             "VECTOR", "LOCATION", "ITEM", "TIME")),
            ),
        ),
        MechanicDefinition(
            name="setstance",
            category="control",
            attributes=(AttributeDefinition("stance", ("s",), TEXT, required=True),),
        ),
        # Projectiles / auras
        MechanicDefinition(
            name="projectile",
            aliases=("p",),
            category="projectile",
            attributes=(
                AttributeDefinition("ontick", ("ot", "onticks"), TEXT),
                AttributeDefinition("onhit", ("oh",), TEXT),
                AttributeDefinition("onend", ("oe",), TEXT),
                AttributeDefinition("onstart", ("os",), TEXT),
                AttributeDefinition("velocity", ("v",), NUMBER, min_value=0),
                AttributeDefinition("interval", ("int", "i"), INTEGER, min_value=1),
                AttributeDefinition("maxrange", ("mr",), NUMBER, min_value=0),
            ),
        ),
        MechanicDefinition(
            name="missile",
            category="projectile",
            attributes=(
                AttributeDefinition("ontick", ("ot",), TEXT),
                AttributeDefinition("onhit", ("oh",), TEXT),
                AttributeDefinition("onend", ("oe",), TEXT),
            ),
        ),
        MechanicDefinition(
            name="aura",
            aliases=("buff", "debuff"),
            category="aura",
            attributes=(
                AttributeDefinition("auraname", ("auraName", "name", "n"), TEXT),
                AttributeDefinition("duration", ("d", "ticks", "t"), INTEGER, min_value=0),
                AttributeDefinition("interval", ("i",), INTEGER, min_value=1),
                AttributeDefinition("onstart", ("os",), TEXT),
                AttributeDefinition("ontick", ("ot",), TEXT),
                AttributeDefinition("onend", ("oe",), TEXT),
            ),
        ),
    )


def _define_targeters() -> tuple[NamedEntry, ...]:
    return (
        NamedEntry("Self", ("Caster", "Boss", "Mob")),
        NamedEntry("Target", ("T",)),
        NamedEntry("Trigger",),
        NamedEntry("Origin", ("Source",)),
        NamedEntry("Parent", ("summoner",)),
        NamedEntry("Owner",),
        NamedEntry("TargetLocation", ("targetloc", "TL")),
        NamedEntry("SelfLocation", ("casterlocation", "bosslocation", "moblocation")),
        NamedEntry("Forward",),
        NamedEntry("NearestPlayer",),
        NamedEntry("PlayersInRadius", ("PIR",)),
        NamedEntry("MobsInRadius", ("MIR",)),
        NamedEntry("EntitiesInRadius", ("EIR", "LivingEntitiesInRadius", "LEIR")),
        NamedEntry("PlayersInWorld", ("World",)),
        NamedEntry("ThreatTable", ("TT",)),
    )


def _define_triggers() -> tuple[NamedEntry, ...]:
    return (
        NamedEntry("onCombat",),
        NamedEntry("onAttack",),
        NamedEntry("onDamaged",),
        NamedEntry("onEnterCombat",),
        NamedEntry("onDropCombat",),
        NamedEntry("onChangeTarget",),
        NamedEntry("onPlayerKill",),
        NamedEntry("onSkillDamage",),
        NamedEntry("onSpawn",),
        NamedEntry("onDespawn",),
        NamedEntry("onReady",),
        NamedEntry("onLoad",),
        NamedEntry("onSpawnOrLoad",),
        NamedEntry("onDeath",),
        NamedEntry("onInteract",),
        NamedEntry("onTimer",),
        NamedEntry("onShoot",),
        NamedEntry("onBowHit",),
        NamedEntry("onProjectileHit",),
        NamedEntry("onExplode",),
        NamedEntry("onTeleport",),
        NamedEntry("onSignal",),
    )


def _define_conditions() -> tuple[NamedEntry, ...]:
    return (
        NamedEntry("mobwithin", ("mobsinradius", "mobsnearby")),
        NamedEntry("playerwithin", ("playersinradius", "playersnearby")),
        NamedEntry("targetwithin",),
        NamedEntry("distance",),
        NamedEntry("health", ("hp",)),
        NamedEntry("incombat",),
        NamedEntry("day", ("isday",)),
        NamedEntry("night", ("isnight",)),
        NamedEntry("raining", ("israining",)),
        NamedEntry("haspotioneffect", ("haspotion",)),
        NamedEntry("offgcd",),
        NamedEntry("chance",),
        NamedEntry("stance",),
        NamedEntry("variableequals", ("varequals", "variableeq", "vareq")),
        NamedEntry("variableisset", ("varisset", "varset")),
        NamedEntry("altitude",),
        NamedEntry("blocking", ("isblocking",)),
        NamedEntry("mounted",),
        NamedEntry("onground", ("grounded",)),
    )
