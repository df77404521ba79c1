"""Player economy: resources, buildings, research and readiness.

Every mutating operation locks the player's resources row, checks
affordability, debits and writes the resulting state inside one
transaction, so concurrent requests from the same player cannot spend the
same pool twice and a rejected action never leaves a partial debit.

Per-turn figures use the game's ``turn_duration_hours``: a building's
hourly rate times the hours in one turn times its level.
"""

import math

from flask import current_app

from worldstage import db
from worldstage.models import (
    BuildingType,
    Game,
    Player,
    PlayerBuilding,
    PlayerResearch,
    PlayerResources,
    Technology,
    MAX_BUILDING_LEVEL,
    RESEARCH_COMPLETED,
    RESEARCH_IN_PROGRESS,
    STARTING_RESOURCES,
    utcnow,
)
from worldstage.services import atomic
from worldstage.services.errors import (
    AccessDenied,
    InsufficientResources,
    InvalidState,
    NotFound,
    ValidationError,
)


BASE_MONEY_PER_TURN = 100
BASE_MATERIALS_PER_TURN = 50
BASE_POPULATION_GROWTH = 25
UPGRADE_COST_FACTOR = 0.8

CATEGORY_ICONS = {
    'economic': '🏭',
    'military': '⚔️',
    'research': '🔬',
    'cultural': '🎭',
    'social': '🏥',
}
DEFAULT_ICON = '🏢'


def clamp_happiness(value):
    return max(0, min(100, value))


def _whole(value) -> int:
    # Hourly rates are fractional; round away float noise before flooring
    return math.floor(round(value, 6))


def _hours_per_turn(player: Player) -> int:
    game = player.game or db.session.get(Game, player.game_id)
    return game.hours_per_turn if game else 24


def get_owned_player(player_id, user) -> Player:
    player = Player.query.filter_by(id=player_id, user_id=user.id).first()
    if not player:
        raise NotFound('Player not found or access denied')
    return player


def _lock_resources(player_id) -> PlayerResources:
    resources = (
        PlayerResources.query.filter_by(player_id=player_id)
        .with_for_update().populate_existing().first()
    )
    if not resources:
        raise InvalidState('Player resources not found')
    return resources


def _debit(resources: PlayerResources, money: int, materials: int, message: str) -> None:
    """Subtract costs only while the stored balance still covers them.

    The comparison runs in the UPDATE itself, so a concurrent debit that
    committed after ``resources`` was read makes this one fail instead of
    driving the balance negative.
    """
    debited = (
        PlayerResources.query.filter(
            PlayerResources.id == resources.id,
            PlayerResources.money >= money,
            PlayerResources.materials >= materials,
        )
        .update({
            PlayerResources.money: PlayerResources.money - money,
            PlayerResources.materials: PlayerResources.materials - materials,
            PlayerResources.updated_at: utcnow(),
        }, synchronize_session=False)
    )
    if not debited:
        raise InsufficientResources(message)
    db.session.expire(resources, ['money', 'materials', 'updated_at'])


def _lookup(model, ident, label):
    """Resolve a catalog row by integer id or by its code."""
    if ident is None or ident == '':
        raise ValidationError(f"{label} is required")
    row = None
    if isinstance(ident, int) and not isinstance(ident, bool):
        row = db.session.get(model, ident)
    elif isinstance(ident, str):
        row = db.session.get(model, int(ident)) if ident.isdecimal() else model.query.filter_by(code=ident).first()
    if not row:
        raise NotFound(f"{label} not found")
    return row


def _apply_bonuses(resources: PlayerResources, effects: dict) -> None:
    effects = effects or {}
    resources.population = max(0, resources.population + int(effects.get('population_growth', 0) or 0))
    resources.happiness = clamp_happiness(resources.happiness + int(effects.get('happiness_bonus', 0) or 0))


def upgrade_cost(building_type: BuildingType, level: int):
    """Cost of taking a building from ``level`` to ``level + 1``."""
    return (
        _whole(building_type.cost_money * (level + 1) * UPGRADE_COST_FACTOR),
        _whole(building_type.cost_materials * (level + 1) * UPGRADE_COST_FACTOR),
    )


def building_view(building: PlayerBuilding, hours_per_turn: int) -> dict:
    bt = building.building_type
    effects = bt.effects or {}
    level = building.level
    if level < MAX_BUILDING_LEVEL:
        next_money, next_materials = upgrade_cost(bt, level)
    else:
        next_money = next_materials = None
    return {
        'id': building.id,
        'building_type_id': bt.id,
        'name': bt.name,
        'description': bt.description,
        'category': bt.category,
        'icon': CATEGORY_ICONS.get(bt.category, DEFAULT_ICON),
        'level': level,
        'max_level': MAX_BUILDING_LEVEL,
        'money_per_turn': _whole((effects.get('money_per_hour') or 0) * hours_per_turn * level),
        'materials_per_turn': _whole((effects.get('materials_per_hour') or 0) * hours_per_turn * level),
        'population_bonus': (effects.get('population_growth') or 0) * level,
        'happiness_bonus': (effects.get('happiness_bonus') or 0) * level,
        'cost_money': bt.cost_money,
        'cost_materials': bt.cost_materials,
        'upgrade_cost_money': next_money,
        'upgrade_cost_materials': next_materials,
    }


# ---- Resources ----

def income_per_turn(player: Player) -> dict:
    hours = _hours_per_turn(player)
    money = BASE_MONEY_PER_TURN
    materials = BASE_MATERIALS_PER_TURN
    population = BASE_POPULATION_GROWTH
    for building in PlayerBuilding.query.filter_by(player_id=player.id).all():
        effects = building.building_type.effects or {}
        money += (effects.get('money_per_hour') or 0) * hours * building.level
        materials += (effects.get('materials_per_hour') or 0) * hours * building.level
        population += (effects.get('population_growth') or 0) * building.level
    return {
        'money_per_turn': _whole(money),
        'materials_per_turn': _whole(materials),
        'population_growth': _whole(population),
    }


def get_resources(player: Player) -> dict:
    resources = PlayerResources.query.filter_by(player_id=player.id).first()
    if not resources:
        resources = PlayerResources(player_id=player.id, **STARTING_RESOURCES)
        db.session.add(resources)
        db.session.commit()
        current_app.logger.info(f"[resources] created default resources for player={player.id}")
    data = resources.to_dict()
    data.update(income_per_turn(player))
    data['last_updated'] = utcnow().isoformat()
    return data


# ---- Buildings ----

def list_buildings(player: Player) -> list:
    hours = _hours_per_turn(player)
    buildings = (
        PlayerBuilding.query.filter_by(player_id=player.id)
        .order_by(PlayerBuilding.created_at.desc(), PlayerBuilding.id.desc())
        .all()
    )
    return [building_view(b, hours) for b in buildings]


def construct_building(player: Player, building_type_id) -> dict:
    bt = _lookup(BuildingType, building_type_id, 'Building type')
    with atomic():
        resources = _lock_resources(player.id)
        if resources.money < bt.cost_money or resources.materials < bt.cost_materials:
            raise InsufficientResources('Insufficient resources')
        _debit(resources, bt.cost_money, bt.cost_materials, 'Insufficient resources')
        building = PlayerBuilding(player_id=player.id, building_type=bt, level=1)
        db.session.add(building)
        _apply_bonuses(resources, bt.effects)
        db.session.flush()
        view = building_view(building, _hours_per_turn(player))
    current_app.logger.info(f"[construct] player={player.id} building={view['id']} type={bt.code}")
    return view


def upgrade_building(building_id, user) -> dict:
    with atomic():
        building = (
            PlayerBuilding.query.filter_by(id=building_id)
            .with_for_update().populate_existing().first()
        )
        if not building:
            raise NotFound('Building not found')
        player = building.player
        if player.user_id != user.id:
            raise AccessDenied('Access denied')
        if building.level >= MAX_BUILDING_LEVEL:
            raise InvalidState('Building is already at maximum level')

        bt = building.building_type
        cost_money, cost_materials = upgrade_cost(bt, building.level)
        resources = _lock_resources(player.id)
        if resources.money < cost_money or resources.materials < cost_materials:
            raise InsufficientResources('Insufficient resources for upgrade')

        _debit(resources, cost_money, cost_materials, 'Insufficient resources for upgrade')
        # Only one upgrade may move the building off the level it was priced at
        upgraded = (
            PlayerBuilding.query.filter_by(id=building.id, level=building.level)
            .update({
                PlayerBuilding.level: PlayerBuilding.level + 1,
                PlayerBuilding.updated_at: utcnow(),
            }, synchronize_session=False)
        )
        if not upgraded:
            raise InvalidState('Building was upgraded concurrently')
        db.session.expire(building, ['level', 'updated_at'])
        # Each upgrade adds another full increment of the type's bonuses
        _apply_bonuses(resources, bt.effects)
        view = building_view(building, _hours_per_turn(player))
    current_app.logger.info(f"[upgrade] player={player.id} building={building_id} level={view['level']}")
    return view


# ---- Research ----

def _research_progress(research: PlayerResearch, tech: Technology, hours_per_turn: int, now=None):
    """Return (elapsed fraction 0..1, turns remaining) for a running research."""
    now = now or utcnow()
    total = max(tech.research_time_hours, 0)
    if total == 0:
        return 1.0, 0
    elapsed = max(0.0, (now - research.started_at).total_seconds() / 3600.0)
    remaining = max(0.0, total - elapsed)
    return min(1.0, elapsed / total), math.ceil(remaining / hours_per_turn)


def refresh_research(player: Player) -> None:
    """Mark research whose time has fully elapsed as completed."""
    hours = _hours_per_turn(player)
    now = utcnow()
    running = PlayerResearch.query.filter_by(player_id=player.id, status=RESEARCH_IN_PROGRESS).all()
    changed = False
    for research in running:
        fraction, _ = _research_progress(research, research.technology, hours, now)
        if fraction >= 1.0:
            research.status = RESEARCH_COMPLETED
            research.progress = 100
            research.completed_at = now
            changed = True
            current_app.logger.info(f"[research] player={player.id} completed technology={research.technology_id}")
        else:
            research.progress = int(fraction * 100)
    if changed or running:
        db.session.commit()


def list_technologies(player: Player) -> list:
    refresh_research(player)
    hours = _hours_per_turn(player)
    rows = {r.technology_id: r for r in PlayerResearch.query.filter_by(player_id=player.id).all()}
    techs = Technology.query.order_by(Technology.tier, Technology.category, Technology.name).all()
    result = []
    for tech in techs:
        research = rows.get(tech.id)
        turns_remaining = None
        if research and research.status == RESEARCH_IN_PROGRESS:
            _, turns_remaining = _research_progress(research, tech, hours)
        entry = tech.to_dict()
        entry.update({
            'technology_id': tech.id,
            'status': research.status if research else 'available',
            'progress': research.progress if research else 0,
            'turns_remaining': turns_remaining,
        })
        result.append(entry)
    return result


def start_research(player: Player, technology_id) -> dict:
    tech = _lookup(Technology, technology_id, 'Technology')
    refresh_research(player)
    with atomic():
        resources = _lock_resources(player.id)
        if PlayerResearch.query.filter_by(player_id=player.id, technology_id=tech.id).first():
            raise InvalidState('Technology already researched or in progress')

        prerequisites = list(tech.prerequisites or [])
        if prerequisites:
            completed = {
                r.technology_id
                for r in PlayerResearch.query.filter(
                    PlayerResearch.player_id == player.id,
                    PlayerResearch.technology_id.in_(prerequisites),
                    PlayerResearch.status == RESEARCH_COMPLETED,
                ).all()
            }
            if not set(prerequisites).issubset(completed):
                raise InvalidState('Prerequisites not met')

        if resources.money < tech.research_cost:
            raise InsufficientResources('Insufficient money for research')

        _debit(resources, tech.research_cost, 0, 'Insufficient money for research')
        research = PlayerResearch(
            player_id=player.id,
            technology_id=tech.id,
            status=RESEARCH_IN_PROGRESS,
            progress=0,
            started_at=utcnow(),
        )
        db.session.add(research)

    current_app.logger.info(f"[research] player={player.id} started technology={tech.id}")
    return {
        'id': tech.id,
        'technology_id': tech.id,
        'name': tech.name,
        'status': RESEARCH_IN_PROGRESS,
        'progress': 0,
        'turns_remaining': math.ceil(tech.research_time_hours / _hours_per_turn(player)),
    }


# ---- Readiness ----

def toggle_ready(player: Player) -> Player:
    with atomic():
        locked = Player.query.filter_by(id=player.id).with_for_update().populate_existing().first()
        locked.is_ready = not locked.is_ready
        locked.updated_at = utcnow()
    current_app.logger.info(f"[ready] player={locked.id} is_ready={locked.is_ready}")
    return locked
