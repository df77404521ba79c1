"""Static reference data: countries, building types and technologies.

``seed_catalog`` inserts whatever rows are missing (matched by code) and is
safe to run repeatedly. Technology prerequisites are declared by code here
and stored as technology ids.
"""

from worldstage import db
from worldstage.models import BuildingType, Country, Technology


COUNTRIES = [
    # code, name, x, y, color, capital, government
    ('USA', 'United States', 20, 35, '#3b82f6', 'Washington', 'Federal Republic'),
    ('CAN', 'Canada', 18, 20, '#ef4444', 'Ottawa', 'Parliamentary Democracy'),
    ('BRA', 'Brazil', 32, 68, '#22c55e', 'Brasilia', 'Federal Republic'),
    ('ARG', 'Argentina', 29, 82, '#38bdf8', 'Buenos Aires', 'Federal Republic'),
    ('GBR', 'United Kingdom', 46, 24, '#6366f1', 'London', 'Constitutional Monarchy'),
    ('FRA', 'France', 48, 30, '#0ea5e9', 'Paris', 'Semi-Presidential Republic'),
    ('DEU', 'Germany', 51, 26, '#facc15', 'Berlin', 'Federal Republic'),
    ('EGY', 'Egypt', 56, 44, '#f59e0b', 'Cairo', 'Presidential Republic'),
    ('NGA', 'Nigeria', 50, 56, '#16a34a', 'Abuja', 'Federal Republic'),
    ('ZAF', 'South Africa', 55, 80, '#84cc16', 'Pretoria', 'Parliamentary Republic'),
    ('RUS', 'Russia', 68, 18, '#dc2626', 'Moscow', 'Federal Republic'),
    ('IND', 'India', 70, 46, '#fb923c', 'New Delhi', 'Parliamentary Republic'),
    ('CHN', 'China', 77, 36, '#b91c1c', 'Beijing', 'Single-Party State'),
    ('JPN', 'Japan', 87, 34, '#f43f5e', 'Tokyo', 'Constitutional Monarchy'),
    ('AUS', 'Australia', 85, 78, '#14b8a6', 'Canberra', 'Constitutional Monarchy'),
]

# Hourly rates; one turn multiplies them by the game's turn duration.
BUILDING_TYPES = [
    {
        'code': 'factory',
        'name': 'Factory',
        'description': 'Produces money and materials for your economy',
        'category': 'economic',
        'cost_money': 1000,
        'cost_materials': 500,
        'effects': {'money_per_hour': 200 / 24, 'materials_per_hour': 100 / 24,
                    'population_growth': 50, 'happiness_bonus': -5},
    },
    {
        'code': 'barracks',
        'name': 'Barracks',
        'description': 'Train military units and boost defense',
        'category': 'military',
        'cost_money': 800,
        'cost_materials': 600,
        'effects': {'money_per_hour': 0, 'materials_per_hour': 50 / 24,
                    'population_growth': 30, 'happiness_bonus': 10},
    },
    {
        'code': 'university',
        'name': 'University',
        'description': 'Research new technologies and innovations',
        'category': 'research',
        'cost_money': 1200,
        'cost_materials': 400,
        'effects': {'money_per_hour': 50 / 24, 'materials_per_hour': 0,
                    'population_growth': 100, 'happiness_bonus': 15},
    },
    {
        'code': 'cultural_center',
        'name': 'Cultural Center',
        'description': 'Boost happiness and cultural influence',
        'category': 'cultural',
        'cost_money': 900,
        'cost_materials': 300,
        'effects': {'money_per_hour': 100 / 24, 'materials_per_hour': 0,
                    'population_growth': 20, 'happiness_bonus': 25},
    },
]

TECHNOLOGIES = [
    {
        'code': 'advanced_economics', 'name': 'Advanced Economics', 'category': 'economic',
        'description': 'Unlock sophisticated economic models and increase money generation',
        'research_cost': 1500, 'research_time_hours': 72, 'prerequisites': [],
        'effects': {'money_bonus': 25, 'building_cost_reduction': 10},
    },
    {
        'code': 'industrial_automation', 'name': 'Industrial Automation', 'category': 'economic',
        'description': 'Automate production processes for massive efficiency gains',
        'research_cost': 2500, 'research_time_hours': 96, 'prerequisites': ['advanced_economics'],
        'effects': {'materials_bonus': 40, 'population_bonus': -200},
    },
    {
        'code': 'military_doctrine', 'name': 'Modern Military Doctrine', 'category': 'military',
        'description': 'Advanced military strategies and unit coordination',
        'research_cost': 1200, 'research_time_hours': 72, 'prerequisites': [],
        'effects': {},
    },
    {
        'code': 'cyber_warfare', 'name': 'Cyber Warfare', 'category': 'military',
        'description': 'Digital espionage and defense capabilities',
        'research_cost': 2000, 'research_time_hours': 96, 'prerequisites': ['military_doctrine'],
        'effects': {},
    },
    {
        'code': 'mass_media', 'name': 'Mass Media', 'category': 'cultural',
        'description': 'Broadcast your culture and influence across the globe',
        'research_cost': 1000, 'research_time_hours': 48, 'prerequisites': [],
        'effects': {'happiness_bonus': 15},
    },
    {
        'code': 'social_networks', 'name': 'Social Networks', 'category': 'cultural',
        'description': 'Connect your citizens and influence global opinion',
        'research_cost': 1800, 'research_time_hours': 72, 'prerequisites': ['mass_media'],
        'effects': {'happiness_bonus': 20},
    },
    {
        'code': 'renewable_energy', 'name': 'Renewable Energy', 'category': 'environmental',
        'description': 'Clean energy solutions for sustainable development',
        'research_cost': 1600, 'research_time_hours': 72, 'prerequisites': [],
        'effects': {'happiness_bonus': 10, 'building_cost_reduction': 15},
    },
    {
        'code': 'climate_engineering', 'name': 'Climate Engineering', 'category': 'environmental',
        'description': 'Advanced weather control and environmental restoration',
        'research_cost': 3000, 'research_time_hours': 120, 'prerequisites': ['renewable_energy'],
        'effects': {'happiness_bonus': 25, 'population_bonus': 500},
    },
]


def seed_catalog() -> dict:
    """Insert missing catalog rows. Returns counts of newly added rows."""
    added = {'countries': 0, 'building_types': 0, 'technologies': 0}

    existing = {c.code for c in Country.query.all()}
    for code, name, x, y, color, capital, government in COUNTRIES:
        if code in existing:
            continue
        db.session.add(Country(code=code, name=name, position_x=x, position_y=y, color_hex=color,
                               capital_name=capital, government_type=government))
        added['countries'] += 1

    existing = {b.code for b in BuildingType.query.all()}
    for entry in BUILDING_TYPES:
        if entry['code'] in existing:
            continue
        db.session.add(BuildingType(**entry))
        added['building_types'] += 1

    # Technologies are inserted in declaration order so prerequisites resolve
    by_code = {t.code: t for t in Technology.query.all()}
    for entry in TECHNOLOGIES:
        if entry['code'] in by_code:
            continue
        prereq_ids = [by_code[code].id for code in entry['prerequisites']]
        tech = Technology(
            code=entry['code'],
            name=entry['name'],
            description=entry['description'],
            category=entry['category'],
            tier=2 if prereq_ids else 1,
            research_cost=entry['research_cost'],
            research_time_hours=entry['research_time_hours'],
            prerequisites=prereq_ids,
            effects=entry['effects'],
        )
        db.session.add(tech)
        db.session.flush()
        by_code[tech.code] = tech
        added['technologies'] += 1

    db.session.commit()
    return added
