"""
Unit tests for string cut selectors.
"""

from __future__ import annotations

import pytest

from razormon.modules.exceptions import ConfigurationError, SelectionError
from razormon.modules.object_selection import CutSelector
from razormon.modules.physics_objects import MissingEnergy, make_jet


@pytest.mark.unit
class TestCutSelector:
    """Test compiling and evaluating cut strings."""

    def test_simple_threshold(self) -> None:
        selector = CutSelector("pt > 80")

        assert selector(make_jet(100.0, 0.0, 0.0))
        assert not selector(make_jet(60.0, 0.0, 0.0))

    def test_threshold_is_strict(self) -> None:
        assert not CutSelector("pt > 80")(make_jet(80.0, 0.0, 0.0))

    def test_cpp_style_operators(self) -> None:
        """&&, || and ! are accepted."""
        selector = CutSelector("pt > 30 && abs(eta) < 2.4")

        assert selector(make_jet(50.0, -1.0, 0.0))
        assert not selector(make_jet(50.0, 3.0, 0.0))
        assert CutSelector("pt > 500 || eta > 1")(make_jet(50.0, 2.0, 0.0))
        assert CutSelector("!(pt > 500)")(make_jet(50.0, 0.0, 0.0))

    def test_not_equal_is_kept(self) -> None:
        assert CutSelector("pt != 50")(make_jet(60.0, 0.0, 0.0))

    def test_python_operators(self) -> None:
        assert CutSelector("pt > 30 and not abs(eta) > 2.4")(make_jet(40.0, 1.0, 0.0))

    def test_met_attributes(self) -> None:
        met = MissingEnergy(30.0, 40.0, sum_et=500.0)

        assert CutSelector("pt > 0")(met)
        assert CutSelector("pt == 50 && sum_et > 100")(met)

    def test_empty_cut_accepts_everything(self) -> None:
        assert CutSelector("")(make_jet(1.0, 0.0, 0.0))
        assert CutSelector("   ")(MissingEnergy(0.0, 0.0))

    def test_invalid_syntax(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            CutSelector("pt >")

        assert "pt >" in str(exc_info.value)

    def test_non_string_cut(self) -> None:
        with pytest.raises(ConfigurationError):
            CutSelector(80)

    def test_unknown_attribute(self) -> None:
        selector = CutSelector("btag > 0.5")

        with pytest.raises(SelectionError) as exc_info:
            selector(make_jet(100.0, 0.0, 0.0))

        assert "btag" in str(exc_info.value)

    def test_no_builtins(self) -> None:
        """Only whitelisted functions are reachable from a cut."""
        with pytest.raises(SelectionError):
            CutSelector("open('x')")(make_jet(100.0, 0.0, 0.0))

    def test_repr(self) -> None:
        assert "pt > 80" in repr(CutSelector("pt > 80"))


@pytest.mark.unit
class TestCheck:
    """Test checking a cut's names against an object without evaluating it."""

    def test_names(self) -> None:
        selector = CutSelector("pt > 30 && abs(eta) < 2.4 && !(phi > pi)")

        assert selector.names == ["eta", "phi", "pt"]

    def test_known_attributes(self) -> None:
        CutSelector("pt > 30 && abs(eta) < 2.4").check(make_jet(0.0, 0.0, 0.0))
        CutSelector("pt > 0 && sum_et >= 0").check(MissingEnergy(0.0, 0.0))

    def test_unknown_attribute(self) -> None:
        with pytest.raises(SelectionError) as exc_info:
            CutSelector("ptt > 80").check(make_jet(0.0, 0.0, 0.0))

        assert "ptt" in str(exc_info.value)

    def test_name_behind_short_circuit(self) -> None:
        """Names that evaluation would skip are still checked."""
        selector = CutSelector("pt > 100 && btag > 0.5")

        assert selector(make_jet(50.0, 0.0, 0.0)) is False
        with pytest.raises(SelectionError):
            selector.check(make_jet(0.0, 0.0, 0.0))

    def test_jet_attribute_on_met(self) -> None:
        with pytest.raises(SelectionError):
            CutSelector("eta < 2.4").check(MissingEnergy(0.0, 0.0))

    def test_empty_cut(self) -> None:
        selector = CutSelector("")

        assert selector.names == []
        selector.check(MissingEnergy(0.0, 0.0))
