import json
from decimal import Decimal

import pytest

from computations import compute_month
from config import (
    RecordValidationError,
    Settings,
    SettingsError,
    dict_to_month,
    load_month,
    load_settings,
    month_to_dict,
    save_month,
)


def _month_data():
    return {
        "version": 1,
        "mess_name": "Green House",
        "period": {"id": "2024-02", "name": "February 2024"},
        "members": [
            {"id": "alice", "display_name": "Alice"},
            {"id": "bob", "display_name": "Bob"},
        ],
        "meals": [
            {"member_id": "alice", "date": "2024-02-01", "breakfast": 1, "lunch": 1, "dinner": "0.5"},
            {"member_id": "bob", "date": "2024-02-01", "lunch": 1},
        ],
        "deposits": [{"member_id": "alice", "amount": "500", "date": "2024-02-01"}],
        "meal_costs": [{"member_id": "bob", "amount": 140, "date": "2024-02-01", "description": "rice"}],
        "other_costs": [{"member_id": "alice", "amount": 60, "is_shared": True, "description": "internet"}],
    }


def test_dict_to_month_fills_period_and_coerces():
    month = dict_to_month(_month_data())
    assert month.period.is_active is True
    assert all(r.period_id == "2024-02" for r in month.meals + month.deposits)
    assert month.meals[0].dinner == Decimal("0.5")
    assert month.deposits[0].amount == Decimal(500)
    assert month.other_costs[0].is_shared is True


def test_month_round_trip(tmp_path, basic_month):
    path = tmp_path / "month.json"
    save_month(basic_month, str(path))
    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["deposits"][0]["amount"] == "500"

    loaded = load_month(str(path))
    assert loaded == basic_month
    assert compute_month(loaded) == compute_month(basic_month)


def test_month_to_dict_keeps_full_precision(basic_month):
    d = month_to_dict(basic_month)
    d["meal_costs"][0]["amount"] = "300.123456789"
    assert dict_to_month(d).meal_costs[0].amount == Decimal("300.123456789")


def test_missing_field_is_reported():
    data = _month_data()
    del data["deposits"][0]["amount"]
    with pytest.raises(RecordValidationError, match=r"deposits\[0\]: missing field\(s\) amount"):
        dict_to_month(data)


def test_alternate_field_name_is_rejected():
    data = _month_data()
    data["meals"][1] = {"userId": "bob", "date": "2024-02-01", "lunch": 1}
    with pytest.raises(RecordValidationError, match="unknown field"):
        dict_to_month(data)


def test_foreign_period_record_is_rejected():
    data = _month_data()
    data["deposits"][0]["period_id"] = "2024-01"
    with pytest.raises(RecordValidationError, match="does not match"):
        dict_to_month(data)


def test_non_numeric_amount_is_rejected():
    data = _month_data()
    data["meal_costs"][0]["amount"] = "lots"
    with pytest.raises(RecordValidationError, match=r"meal_costs\[0\]"):
        dict_to_month(data)


def test_is_shared_must_be_boolean():
    data = _month_data()
    data["other_costs"][0]["is_shared"] = "yes"
    with pytest.raises(RecordValidationError, match="is_shared"):
        dict_to_month(data)


def test_missing_period_and_bad_version():
    data = _month_data()
    del data["period"]
    with pytest.raises(RecordValidationError, match="period"):
        dict_to_month(data)
    data = _month_data()
    data["version"] = 2
    with pytest.raises(RecordValidationError, match="version"):
        dict_to_month(data)


def test_load_month_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_month(str(tmp_path / "nope.json"))


def test_load_settings(tmp_path):
    assert load_settings(str(tmp_path / "missing.json")) == Settings()
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"currency": "USD", "decimal_places": 0}), encoding="utf-8")
    assert load_settings(str(path)) == Settings(currency="USD", decimal_places=0)


@pytest.mark.parametrize("amount", ["NaN", float("nan"), "Infinity", float("inf")])
def test_non_finite_amount_is_rejected(amount):
    data = _month_data()
    data["deposits"][0]["amount"] = amount
    with pytest.raises(RecordValidationError, match=r"deposits\[0\]: amount"):
        dict_to_month(data)


def test_nan_literal_in_month_file(tmp_path):
    path = tmp_path / "month.json"
    path.write_text(json.dumps(_month_data()).replace('"500"', "NaN"), encoding="utf-8")
    with pytest.raises(RecordValidationError, match="amount"):
        load_month(str(path))


def test_bad_date_is_rejected():
    data = _month_data()
    data["meals"][0]["date"] = "garbage"
    with pytest.raises(RecordValidationError, match=r"meals\[0\]: date"):
        dict_to_month(data)


def test_malformed_shapes_are_validation_errors():
    data = _month_data()
    data["members"] = ["alice"]
    with pytest.raises(RecordValidationError, match=r"members\[0\]"):
        dict_to_month(data)

    data = _month_data()
    data["meals"] = {"member_id": "alice"}
    with pytest.raises(RecordValidationError, match="meals"):
        dict_to_month(data)

    with pytest.raises(RecordValidationError, match="month"):
        dict_to_month([_month_data()])


def test_bad_settings_file(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"decimal_places": "two"}), encoding="utf-8")
    with pytest.raises(SettingsError, match="decimal_places"):
        load_settings(str(path))

    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(SettingsError):
        load_settings(str(path))
