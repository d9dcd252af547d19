"""
Trigger-decision evaluator

Decides whether an event is accepted by a configurable combination of
DCS partition status and HLT path decisions. The monitor only relies on
`enabled()`, `accepts(event)` and `init_run(run)`, so any object providing
these can be injected instead.
"""

from __future__ import annotations

import fnmatch
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional


@dataclass
class TriggerFlagConfig:
    """Configuration of one trigger-decision evaluator."""

    and_or: bool = False
    enabled: bool = True
    dcs_partitions: List[int] = field(default_factory=list)
    and_or_dcs: bool = False
    error_reply_dcs: bool = True
    and_or_hlt: bool = True
    hlt_paths: List[str] = field(default_factory=list)
    error_reply_hlt: bool = False
    verbosity_level: int = 1


class TriggerEventFlag:
    """
    Event filter built from DCS and HLT requirements

    The flag is enabled only if switched on and at least one sub-filter is
    configured. A disabled flag accepts every event.
    """

    def __init__(self, config: Optional[TriggerFlagConfig] = None, name: str = "TriggerEventFlag") -> None:
        self.config = config if config is not None else TriggerFlagConfig()
        self.name = name
        self.logger = logging.getLogger(f"RazorMonitor.{name}")

        self.on_dcs = bool(self.config.dcs_partitions)
        self.on_hlt = bool(self.config.hlt_paths)
        self._on = self.config.enabled and (self.on_dcs or self.on_hlt)

        # Path expressions, possibly expanded against the run's HLT menu
        self.hlt_paths: List[str] = list(self.config.hlt_paths)

    def enabled(self) -> bool:
        return self._on

    def init_run(self, run: Any = None) -> None:
        """
        Prepare the flag for a new run

        If the run provides its HLT menu, wildcard expressions are expanded to
        the concrete path names of that menu. Expressions matching nothing are
        kept as given and reported.
        """
        self.hlt_paths = list(self.config.hlt_paths)
        menu = getattr(run, "hlt_menu", None)
        if not self.on_hlt or menu is None:
            return

        expanded = []
        for expression in self.config.hlt_paths:
            negate = expression.startswith("~")
            pattern = expression[1:] if negate else expression
            matches = fnmatch.filter(menu, pattern)
            if not matches:
                if self.config.verbosity_level > 0:
                    self.logger.warning(
                        f"HLT path expression '{expression}' does not match any path in run {run.run}"
                    )
                expanded.append(expression)
                continue
            prefix = "~" if negate else ""
            expanded.extend(prefix + match for match in matches)

        self.hlt_paths = expanded
        self.logger.debug(f"HLT paths for run {run.run}: {self.hlt_paths}")

    def accepts(self, event: Any) -> bool:
        """Return the combined decision of all configured sub-filters."""
        if not self._on:
            return True

        decisions = []
        if self.on_dcs:
            decisions.append(self.accept_dcs(event))
        if self.on_hlt:
            decisions.append(self.accept_hlt(event))

        accept = any(decisions) if self.config.and_or else all(decisions)
        if self.config.verbosity_level > 1:
            self.logger.debug(f"{event}: decisions {decisions} -> {accept}")
        return accept

    def accept_dcs(self, event: Any) -> bool:
        status = getattr(event, "dcs_status", None)
        if status is None:
            if self.config.verbosity_level > 1:
                self.logger.debug(f"{event}: no DCS status available")
            return self.config.error_reply_dcs

        results = []
        for partition in self.config.dcs_partitions:
            if partition in status:
                results.append(bool(status[partition]))
            else:
                results.append(self.config.error_reply_dcs)

        return any(results) if self.config.and_or_dcs else all(results)

    def accept_hlt(self, event: Any) -> bool:
        trigger_results = getattr(event, "trigger_results", None)
        if trigger_results is None:
            if self.config.verbosity_level > 1:
                self.logger.debug(f"{event}: no trigger results available")
            return self.config.error_reply_hlt

        results = []
        for expression in self.hlt_paths:
            results.append(self._accept_path(expression, trigger_results))

        return any(results) if self.config.and_or_hlt else all(results)

    def _accept_path(self, expression: str, trigger_results: Any) -> bool:
        negate = expression.startswith("~")
        pattern = expression[1:] if negate else expression

        matches = fnmatch.filter(trigger_results.keys(), pattern)
        if not matches:
            return self.config.error_reply_hlt

        fired = any(bool(trigger_results[name]) for name in matches)
        return not fired if negate else fired

    def __repr__(self) -> str:
        return f"TriggerEventFlag(name={self.name!r}, on={self._on})"
