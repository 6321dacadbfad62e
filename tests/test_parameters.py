# tests/test_parameters.py
import pytest

from cms.models import SystemParameter
from cms.projections import parameters_to_map
from cms.seed import ensure_parameters_seeded, load_parameters_config
from cms.services.parameters import (
    ParameterValueError,
    batch_update,
    get_all_grouped,
    list_parameters,
    reset_to_defaults,
    validate_definition,
    validate_value,
)


def make_param(**kw):
    # Pas besoin de session, juste un objet en mémoire
    base = {"key": "k", "name": "k", "description": "", "type": "string", "category": "c"}
    base.update(kw)
    return SystemParameter(**base)


# -----------------------------------------------------------------
# parameters_to_map
# -----------------------------------------------------------------
def test_map_last_duplicate_wins():
    rows = [
        make_param(key="siteName", value="first", category="a"),
        make_param(key="other", value=1, category="a"),
        make_param(key="siteName", value="second", category="b"),
    ]
    assert parameters_to_map(rows) == {"siteName": "second", "other": 1}


def test_map_empty():
    assert parameters_to_map([]) == {}


# -----------------------------------------------------------------
# validate_value / validate_definition
# -----------------------------------------------------------------
def test_validate_string_and_boolean():
    assert validate_value(make_param(type="string"), "x") is True
    assert validate_value(make_param(type="string"), 1) is False
    assert validate_value(make_param(type="boolean"), False) is True
    assert validate_value(make_param(type="boolean"), "false") is False


def test_validate_number_bounds():
    p = make_param(type="number", min=1, max=10)
    assert validate_value(p, 1) is True
    assert validate_value(p, 10.0) is True
    assert validate_value(p, 0) is False
    assert validate_value(p, 11) is False
    assert validate_value(p, True) is False
    assert validate_value(p, "5") is False


def test_validate_number_rejects_non_finite():
    p = make_param(type="number", min=1, max=10)
    assert validate_value(p, float("nan")) is False
    assert validate_value(p, float("inf")) is False

    unbounded = make_param(type="number")
    assert validate_value(unbounded, float("nan")) is False
    assert validate_value(unbounded, float("-inf")) is False
    assert validate_value(unbounded, 1e308) is True


def test_validate_array_rejects_nested_non_finite():
    p = make_param(type="array")
    assert validate_value(p, [1, 2.5, "x"]) is True
    assert validate_value(p, [1, float("nan")]) is False
    assert validate_value(p, [[{"v": float("inf")}]]) is False


def test_validate_array_and_select():
    assert validate_value(make_param(type="array"), ["a"]) is True
    assert validate_value(make_param(type="array"), "a") is False

    p = make_param(type="select", options=["auto", "manual"])
    assert validate_value(p, "manual") is True
    assert validate_value(p, "disabled") is False
    assert validate_value(make_param(type="select", options=None), "auto") is False


def test_validate_unknown_type():
    assert validate_value(make_param(type="weird"), "x") is False


def test_definition_rules():
    validate_definition(make_param(type="number", min=1, max=2))
    validate_definition(make_param(type="select", options=["a"]))

    with pytest.raises(ParameterValueError):
        validate_definition(make_param(type="number", min=5, max=5))
    with pytest.raises(ParameterValueError):
        validate_definition(make_param(type="select", options=[]))


# -----------------------------------------------------------------
# Queries and updates (DB)
# -----------------------------------------------------------------
def _seed(session):
    session.add_all([
        make_param(key="title", value="Home", category="seo"),
        make_param(key="siteName", value="Demo", category="general", default_value="PonyMind"),
        make_param(key="maxFileSize", value=5, type="number", min=1, max=100,
                   category="general", default_value=5),
        make_param(key="moderationMode", value="auto", type="select",
                   options=["auto", "manual"], category="security"),
    ])
    session.commit()


def test_list_ordered_by_category_then_key(session):
    _seed(session)
    keys = [(p.category, p.key) for p in list_parameters(session)]
    assert keys == [
        ("general", "maxFileSize"),
        ("general", "siteName"),
        ("security", "moderationMode"),
        ("seo", "title"),
    ]


def test_grouped_by_category(session):
    _seed(session)
    grouped = get_all_grouped(session)
    assert list(grouped) == ["general", "security", "seo"]
    assert [p.key for p in grouped["general"]] == ["maxFileSize", "siteName"]


def test_batch_update(session):
    _seed(session)
    n = batch_update(session, [
        {"key": "siteName", "value": "New"},
        {"key": "maxFileSize", "value": 20},
    ])
    session.commit()
    assert n == 2

    values = {p.key: p.value for p in list_parameters(session)}
    assert values["siteName"] == "New"
    assert values["maxFileSize"] == 20


def test_batch_update_is_all_or_nothing(session):
    _seed(session)
    with pytest.raises(ParameterValueError):
        batch_update(session, [
            {"key": "siteName", "value": "New"},
            {"key": "maxFileSize", "value": 1000},
        ])
    session.rollback()

    values = {p.key: p.value for p in list_parameters(session)}
    assert values["siteName"] == "Demo"


def test_batch_update_unknown_key(session):
    _seed(session)
    with pytest.raises(ParameterValueError):
        batch_update(session, [{"key": "nope", "value": 1}])


def test_batch_update_rejects_malformed_items(session):
    _seed(session)
    with pytest.raises(ParameterValueError):
        batch_update(session, ["siteName"])
    with pytest.raises(ParameterValueError):
        batch_update(session, [{"key": {}, "value": 1}])
    with pytest.raises(ParameterValueError):
        batch_update(session, [{"value": 1}])


def test_batch_update_rejects_nan(session):
    _seed(session)
    with pytest.raises(ParameterValueError):
        batch_update(session, [{"key": "maxFileSize", "value": float("nan")}])


def test_reset_to_defaults(session):
    _seed(session)
    batch_update(session, [{"key": "siteName", "value": "Changed"}])
    session.commit()

    n = reset_to_defaults(session)
    session.commit()
    assert n == 2

    values = {p.key: p.value for p in list_parameters(session)}
    assert values["siteName"] == "PonyMind"
    # no default -> untouched
    assert values["title"] == "Home"


# -----------------------------------------------------------------
# Seed
# -----------------------------------------------------------------
def test_load_bundled_config():
    items = load_parameters_config()
    keys = [it["key"] for it in items]
    assert "siteName" in keys
    assert len(keys) == len(set(keys))
    mode = next(it for it in items if it["key"] == "moderationMode")
    assert mode["options"] == ["auto", "manual", "disabled"]
    assert mode["default_value"] == "auto"


def test_load_missing_config_falls_back(tmp_path):
    items = load_parameters_config(tmp_path / "nope.yml")
    assert [it["key"] for it in items] == ["siteName", "maintenanceMode"]


def test_load_invalid_config_falls_back(tmp_path):
    path = tmp_path / "params.yml"
    path.write_text("parameters: not-a-list\n", encoding="utf-8")
    items = load_parameters_config(path)
    assert items[0]["key"] == "siteName"


def test_seed_only_when_empty(app):
    store = app.extensions["store"]
    inserted = ensure_parameters_seeded(store)
    assert inserted == len(load_parameters_config())

    assert ensure_parameters_seeded(store) == 0

    with store.session() as s:
        assert s.query(SystemParameter).count() == inserted


def test_seed_skips_invalid_definitions(app, tmp_path):
    path = tmp_path / "params.yml"
    path.write_text(
        "parameters:\n"
        "  - {key: ok, type: string, value: x, category: a}\n"
        "  - {key: bad, type: number, value: 1, min: 5, max: 1, category: a}\n",
        encoding="utf-8",
    )
    assert ensure_parameters_seeded(app.extensions["store"], path) == 1


def test_seeded_app_serves_defaults(client, app):
    ensure_parameters_seeded(app.extensions["store"])
    params = client.get("/api/system-parameters").get_json()["parameters"]
    assert params["siteName"] == "PonyMind"
    assert params["maintenanceMode"] is False


def test_seed_skips_invalid_values(app, tmp_path):
    path = tmp_path / "params.yml"
    path.write_text(
        "parameters:\n"
        "  - {key: ok, type: number, value: 3, min: 1, max: 5, category: a}\n"
        "  - {key: tooBig, type: number, value: 50, min: 1, max: 5, category: a}\n"
        "  - {key: wrongType, type: boolean, value: 'yes', category: a}\n"
        "  - {key: badDefault, type: select, value: a, default_value: z, options: [a, b], category: a}\n",
        encoding="utf-8",
    )
    store = app.extensions["store"]
    assert ensure_parameters_seeded(store, path) == 1

    with store.session() as s:
        assert [p.key for p in s.query(SystemParameter).all()] == ["ok"]


def test_seed_race_with_another_worker(app, monkeypatch):
    from sqlalchemy.orm import Query

    store = app.extensions["store"]
    with store.session() as s:
        s.add(make_param(key="siteName", value="Already", category="基本设置"))
        s.commit()

    # Le count() voit encore une table vide, l'autre worker a déjà commité
    monkeypatch.setattr(Query, "count", lambda self: 0)
    assert ensure_parameters_seeded(store) == 0
    monkeypatch.undo()

    with store.session() as s:
        rows = s.query(SystemParameter).all()
        assert [(p.key, p.value) for p in rows] == [("siteName", "Already")]
