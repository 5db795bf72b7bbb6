"""Tests for hotswap models module."""

import types
import pytest

from hotswap.models import ReloadLine, DirectiveConfig, UnitSource, ReloadOutcome


class TestReloadLine:
    """Tests for ReloadLine class."""

    def test_single(self):
        line = ReloadLine(units=("app.models",))
        assert line.is_group is False

    def test_group(self):
        line = ReloadLine(units=("app.a", "app.b"), is_group=True)
        assert line.units == ("app.a", "app.b")

    def test_empty_rejected(self):
        with pytest.raises(ValueError):
            ReloadLine(units=())

    def test_single_with_many_units_rejected(self):
        with pytest.raises(ValueError):
            ReloadLine(units=("app.a", "app.b"))


class TestDirectiveConfig:
    """Tests for DirectiveConfig class."""

    def test_enabled_only_with_switch_on(self):
        assert DirectiveConfig().enabled is False
        assert DirectiveConfig(switch_lines=["switch=off"]).enabled is False
        assert DirectiveConfig(switch_lines=["switch=off", "switch=on"]).enabled is True

    def test_unit_ids_in_order(self):
        config = DirectiveConfig(lines=[
            ReloadLine(units=("a",)),
            ReloadLine(units=("b", "c"), is_group=True),
        ])
        assert config.unit_ids() == ["a", "b", "c"]


class TestUnitSource:
    """Tests for UnitSource class."""

    def test_module_unit(self):
        module = types.ModuleType("app.models")
        source = UnitSource("app.models", module, None, "/src/app/models.py", b"", module)

        assert source.is_module is True
        assert source.module_name == "app.models"

    def test_class_unit(self):
        module = types.ModuleType("app.models")
        source = UnitSource("app.models.Player", module, "Player", "/src/app/models.py", b"")

        assert source.is_module is False


class TestReloadOutcome:
    """Tests for ReloadOutcome class."""

    def test_keeps_success_order(self):
        outcome = ReloadOutcome()
        outcome.add("b")
        outcome.add("a")

        assert outcome.units == ["b", "a"]
        assert list(outcome) == ["b", "a"]
        assert len(outcome) == 2
        assert "a" in outcome

    def test_duplicate_unit_recorded_once(self):
        outcome = ReloadOutcome()
        outcome.add("a", 1)
        outcome.add("b")
        outcome.add("a", 2)

        assert outcome.units == ["a", "b"]
        assert outcome.target("a") == 2

    def test_clear(self):
        outcome = ReloadOutcome()
        outcome.add("a")
        outcome.clear()

        assert len(outcome) == 0
        assert "a" not in outcome

    def test_copy_is_independent(self):
        outcome = ReloadOutcome()
        outcome.add("a", object)

        snapshot = outcome.copy()
        outcome.clear()

        assert snapshot.units == ["a"]
        assert snapshot.target("a") is object
