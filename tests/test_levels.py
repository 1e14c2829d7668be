import pytest

from gemgarden.components.level import LevelDefinition, LevelTable
from gemgarden.errors import InvalidRequest
from gemgarden.factories.levels import LEVELS, gem_name, get_level, lint_levels, load_levels


def test_default_levels_load():
    levels = load_levels()
    assert [level.id for level in levels] == list(range(1, 21))
    first = levels[0]
    assert first.moves == 20
    assert first.goals.score == 500
    assert first.star_thresholds == (500, 800, 1200)


def test_multi_gem_goals_are_parsed_in_order():
    level = get_level(load_levels(), 14)
    assert [(goal.kind, goal.count) for goal in level.goals.gems] == [(0, 8), (2, 8), (4, 8)]
    assert level.goals.score is None


def test_definition_round_trips_through_dict():
    for entry in LEVELS:
        level = LevelDefinition.from_dict(entry)
        assert LevelDefinition.from_dict(level.to_dict()) == level


def test_unknown_level_is_invalid_request():
    levels = load_levels()
    with pytest.raises(InvalidRequest):
        get_level(levels, 99)
    table = LevelTable(levels=levels)
    with pytest.raises(InvalidRequest):
        table.get(0)
    assert table.next_id(1) == 2
    assert table.next_id(20) is None


@pytest.mark.parametrize("overrides,message", [
    ({"moves": 0}, "moves must be positive"),
    ({"starThresholds": [100, 200]}, "expected 3 star thresholds"),
    ({"starThresholds": [300, 200, 400]}, "strictly increasing"),
    ({"goals": {"bonus": 3}}, "Unknown goal keys"),
    ({"goals": {"collectGem": {"type": 1}}}, "'type' and 'count'"),
    ({"id": 0}, "id must be >= 1"),
])
def test_invalid_definitions_are_rejected(overrides, message):
    data = {"id": 1, "name": "Bad", "moves": 10, "goals": {"score": 100}, "starThresholds": [100, 200, 300]}
    data.update(overrides)
    with pytest.raises(ValueError, match=message):
        LevelDefinition.from_dict(data)


def test_missing_field_is_reported():
    with pytest.raises(ValueError, match="moves"):
        LevelDefinition.from_dict({"id": 1, "starThresholds": [1, 2, 3]})


def test_duplicate_ids_are_rejected():
    with pytest.raises(ValueError, match="defined twice"):
        load_levels([LEVELS[0], LEVELS[0]])


def test_default_levels_pass_lint():
    assert lint_levels(load_levels()) == []


def test_lint_flags_content_problems():
    levels = load_levels([
        {"id": 1, "name": "A", "moves": 5, "goals": {"collectGem": {"type": 7, "count": 3}},
         "starThresholds": [10, 20, 30]},
        {"id": 3, "name": "B", "moves": 5, "goals": {"score": 505}, "starThresholds": [100, 600, 900]},
    ])
    problems = lint_levels(levels, kind_count=6)
    assert any("only 6 kinds spawn" in p for p in problems)
    assert any("expected id 2" in p for p in problems)
    assert any("one-star threshold" in p for p in problems)
    assert any("not a multiple of 10" in p for p in problems)


def test_gem_names():
    assert gem_name(0) == "ruby"
    assert gem_name(5) == "citrine"
    assert gem_name(9) == "gem 9"


def test_gem_goal_keeps_its_declared_key():
    data = {"id": 1, "name": "Second slot", "moves": 10,
            "goals": {"collectGem2": {"type": 1, "count": 3}}, "starThresholds": [10, 20, 30]}
    level = LevelDefinition.from_dict(data)
    assert level.to_dict()["goals"] == {"collectGem2": {"type": 1, "count": 3}}
    assert LevelDefinition.from_dict(level.to_dict()) == level


@pytest.mark.parametrize("overrides", [
    {"starThresholds": None},
    {"moves": None},
    {"id": "first"},
    {"starThresholds": [100, "two hundred", 300]},
])
def test_malformed_fields_raise_value_error(overrides):
    data = {"id": 1, "name": "Bad", "moves": 10, "goals": {"score": 100}, "starThresholds": [100, 200, 300]}
    data.update(overrides)
    with pytest.raises(ValueError, match="malformed"):
        LevelDefinition.from_dict(data)
