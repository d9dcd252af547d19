"""
Unit tests for the trigger-decision evaluator.

Tests enabling rules, HLT wildcard matching, negation, DCS gating,
AND/OR combinations, error replies and run initialisation.
"""

from __future__ import annotations

import logging

import pytest

from razormon.modules.physics_objects import Event, Run
from razormon.modules.trigger_flag import TriggerEventFlag, TriggerFlagConfig


def hlt_event(**paths: bool) -> Event:
    return Event(trigger_results=dict(paths))


@pytest.mark.unit
class TestEnabled:
    """Test when a flag is considered on."""

    def test_default_is_off(self) -> None:
        flag = TriggerEventFlag()

        assert not flag.enabled()
        assert flag.accepts(Event())

    def test_hlt_paths_turn_flag_on(self) -> None:
        assert TriggerEventFlag(TriggerFlagConfig(hlt_paths=["HLT_A_v*"])).enabled()

    def test_dcs_partitions_turn_flag_on(self) -> None:
        assert TriggerEventFlag(TriggerFlagConfig(dcs_partitions=[24])).enabled()

    def test_master_switch(self) -> None:
        flag = TriggerEventFlag(TriggerFlagConfig(enabled=False, hlt_paths=["HLT_A_v*"]))

        assert not flag.enabled()
        assert flag.accepts(hlt_event(HLT_A_v1=False))


@pytest.mark.unit
class TestHLT:
    """Test HLT path gating."""

    def test_wildcard_version(self) -> None:
        flag = TriggerEventFlag(TriggerFlagConfig(hlt_paths=["HLT_Ele27_WPTight_Gsf_v*"]))

        assert flag.accepts(hlt_event(HLT_Ele27_WPTight_Gsf_v3=True, HLT_Other_v1=False))
        assert not flag.accepts(hlt_event(HLT_Ele27_WPTight_Gsf_v3=False, HLT_Other_v1=True))

    def test_or_of_paths(self) -> None:
        flag = TriggerEventFlag(TriggerFlagConfig(hlt_paths=["HLT_A_v*", "HLT_B_v*"], and_or_hlt=True))

        assert flag.accepts(hlt_event(HLT_A_v1=False, HLT_B_v2=True))
        assert not flag.accepts(hlt_event(HLT_A_v1=False, HLT_B_v2=False))

    def test_and_of_paths(self) -> None:
        flag = TriggerEventFlag(TriggerFlagConfig(hlt_paths=["HLT_A_v*", "HLT_B_v*"], and_or_hlt=False))

        assert flag.accepts(hlt_event(HLT_A_v1=True, HLT_B_v2=True))
        assert not flag.accepts(hlt_event(HLT_A_v1=True, HLT_B_v2=False))

    def test_negated_path(self) -> None:
        flag = TriggerEventFlag(TriggerFlagConfig(hlt_paths=["~HLT_Veto_v*"]))

        assert flag.accepts(hlt_event(HLT_Veto_v1=False))
        assert not flag.accepts(hlt_event(HLT_Veto_v1=True))

    def test_unmatched_path_uses_error_reply(self) -> None:
        strict = TriggerEventFlag(TriggerFlagConfig(hlt_paths=["HLT_Missing_v*"], error_reply_hlt=False))
        lenient = TriggerEventFlag(TriggerFlagConfig(hlt_paths=["HLT_Missing_v*"], error_reply_hlt=True))

        assert not strict.accepts(hlt_event(HLT_A_v1=True))
        assert lenient.accepts(hlt_event(HLT_A_v1=True))

    def test_no_trigger_results_uses_error_reply(self) -> None:
        strict = TriggerEventFlag(TriggerFlagConfig(hlt_paths=["HLT_A_v*"], error_reply_hlt=False))
        lenient = TriggerEventFlag(TriggerFlagConfig(hlt_paths=["HLT_A_v*"], error_reply_hlt=True))

        assert not strict.accepts(Event())
        assert lenient.accepts(Event())

    def test_repeated_evaluation_is_stable(self) -> None:
        flag = TriggerEventFlag(TriggerFlagConfig(hlt_paths=["HLT_A_v*"]))
        event = hlt_event(HLT_A_v1=True)

        assert [flag.accepts(event) for _ in range(3)] == [True, True, True]


@pytest.mark.unit
class TestDCS:
    """Test DCS partition gating."""

    def test_all_partitions_on(self) -> None:
        flag = TriggerEventFlag(TriggerFlagConfig(dcs_partitions=[24, 25], and_or_dcs=False))

        assert flag.accepts(Event(dcs_status={24: True, 25: True}))
        assert not flag.accepts(Event(dcs_status={24: True, 25: False}))

    def test_any_partition_on(self) -> None:
        flag = TriggerEventFlag(TriggerFlagConfig(dcs_partitions=[24, 25], and_or_dcs=True))

        assert flag.accepts(Event(dcs_status={24: False, 25: True}))

    def test_missing_status_uses_error_reply(self) -> None:
        flag = TriggerEventFlag(TriggerFlagConfig(dcs_partitions=[24], error_reply_dcs=True))

        assert flag.accepts(Event())
        assert flag.accepts(Event(dcs_status={}))

        strict = TriggerEventFlag(TriggerFlagConfig(dcs_partitions=[24], error_reply_dcs=False))
        assert not strict.accepts(Event(dcs_status={}))


@pytest.mark.unit
class TestCombination:
    """Test and_or between DCS and HLT."""

    def test_and(self) -> None:
        flag = TriggerEventFlag(TriggerFlagConfig(and_or=False, dcs_partitions=[24], hlt_paths=["HLT_A_v*"]))

        assert flag.accepts(Event(trigger_results={"HLT_A_v1": True}, dcs_status={24: True}))
        assert not flag.accepts(Event(trigger_results={"HLT_A_v1": True}, dcs_status={24: False}))

    def test_or(self) -> None:
        flag = TriggerEventFlag(TriggerFlagConfig(and_or=True, dcs_partitions=[24], hlt_paths=["HLT_A_v*"]))

        assert flag.accepts(Event(trigger_results={"HLT_A_v1": True}, dcs_status={24: False}))
        assert not flag.accepts(Event(trigger_results={"HLT_A_v1": False}, dcs_status={24: False}))


@pytest.mark.unit
class TestInitRun:
    """Test expansion of path expressions against the run menu."""

    def test_expands_wildcards(self) -> None:
        flag = TriggerEventFlag(TriggerFlagConfig(hlt_paths=["HLT_A_v*", "~HLT_B_v*"]))
        flag.init_run(Run(run=297050, hlt_menu=["HLT_A_v3", "HLT_A_v4", "HLT_B_v1", "HLT_C_v1"]))

        assert flag.hlt_paths == ["HLT_A_v3", "HLT_A_v4", "~HLT_B_v1"]

    def test_unmatched_expression_warns(self, caplog) -> None:
        flag = TriggerEventFlag(TriggerFlagConfig(hlt_paths=["HLT_Missing_v*"], verbosity_level=1))

        with caplog.at_level(logging.WARNING, logger="RazorMonitor"):
            flag.init_run(Run(run=1, hlt_menu=["HLT_A_v1"]))

        assert flag.hlt_paths == ["HLT_Missing_v*"]
        assert "HLT_Missing_v*" in caplog.text

    def test_silent_with_zero_verbosity(self, caplog) -> None:
        flag = TriggerEventFlag(TriggerFlagConfig(hlt_paths=["HLT_Missing_v*"], verbosity_level=0))

        with caplog.at_level(logging.WARNING, logger="RazorMonitor"):
            flag.init_run(Run(run=1, hlt_menu=["HLT_A_v1"]))

        assert caplog.text == ""

    def test_without_menu_keeps_expressions(self) -> None:
        flag = TriggerEventFlag(TriggerFlagConfig(hlt_paths=["HLT_A_v*"]))
        flag.init_run(None)

        assert flag.hlt_paths == ["HLT_A_v*"]
        assert flag.accepts(hlt_event(HLT_A_v7=True))
