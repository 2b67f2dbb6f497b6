"""Diagnostics manager for browser test runs."""

import json
import logging
import os
import time
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class ActionRecord:
    """Information about one interaction verb executed during a test."""
    verb: str
    target: Optional[str]
    start_time: float
    end_time: Optional[float] = None
    duration: Optional[float] = None
    success: Optional[bool] = None
    error: Optional[str] = None
    error_type: Optional[str] = None


class DiagnosticsManager:
    """Records interaction outcomes and writes failure artifacts.

    The interaction layer only feeds records in; writing screenshots and reports
    is left to whoever owns the test run.
    """

    def __init__(self, run_id: str, enabled: bool = True, base_output_dir: str = "test_results"):
        """Initialize the diagnostics manager.

        Args:
            run_id: A unique identifier for this run (e.g., test name or timestamp).
            enabled: Whether diagnostics are enabled.
            base_output_dir: The base directory to store results for all runs.
        """
        self.run_id = run_id
        self.enabled = enabled
        self.logger = logging.getLogger(__name__)
        self.actions: List[ActionRecord] = []
        self.start_time = time.time()
        self.run_output_dir = os.path.join(base_output_dir, self.run_id)

    def _ensure_output_dir(self) -> bool:
        try:
            os.makedirs(self.run_output_dir, exist_ok=True)
            return True
        except OSError as e:
            self.logger.error(f"Failed to create diagnostics directory {self.run_output_dir}: {e}")
            return False

    @contextmanager
    def track_action(self, verb: str, target: Optional[Any] = None):
        """Context manager recording the timing and outcome of one verb.

        Args:
            verb: Name of the verb (e.g., 'click', 'read_text')
            target: Locator or other description of what the verb acts on
        """
        if not self.enabled:
            yield
            return

        record = ActionRecord(verb=verb, target=str(target) if target is not None else None, start_time=time.time())
        self.actions.append(record)
        try:
            yield record
        except Exception as e:
            self._finish(record, False, e)
            raise
        self._finish(record, True)

    def _finish(self, record: ActionRecord, success: bool, error: Optional[BaseException] = None) -> None:
        record.end_time = time.time()
        record.duration = record.end_time - record.start_time
        record.success = success
        if error is not None:
            record.error = str(error)
            record.error_type = type(error).__name__
            self.logger.debug(f"Action {record.verb} on {record.target} failed after {record.duration:.2f}s: {error}")
        else:
            self.logger.debug(f"Action {record.verb} on {record.target} completed in {record.duration:.2f}s")

    def failed_actions(self) -> List[ActionRecord]:
        return [a for a in self.actions if a.success is False]

    def get_diagnostics(self) -> Dict[str, Any]:
        """Get diagnostics information.

        Returns:
            Dict with diagnostics information
        """
        return {
            "run_id": self.run_id,
            "start_time": self.start_time,
            "duration": time.time() - self.start_time,
            "action_count": len(self.actions),
            "failed_count": len(self.failed_actions()),
            "actions": [asdict(a) for a in self.actions]
        }

    def save_report(self, filename: str = "actions.json") -> Optional[str]:
        """Save the action log as JSON within the run's directory.

        Returns:
            Path of the written file, or None when diagnostics are disabled or writing failed
        """
        if not self.enabled:
            self.logger.debug(f"Skipping save_report for '{filename}' as diagnostics are disabled.")
            return None
        if not filename.endswith('.json'):
            filename += '.json'
        if not self._ensure_output_dir():
            return None

        filepath = os.path.join(self.run_output_dir, filename)
        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump(self.get_diagnostics(), f, indent=4, ensure_ascii=False)
            self.logger.info(f"Saved action log to '{filepath}'")
            return filepath
        except (OSError, TypeError) as e:
            self.logger.error(f"Failed to write action log to '{filepath}': {e}")
            return None

    def capture_failure(self, driver, name: str) -> Dict[str, Optional[str]]:
        """Write a screenshot and the action log for a failed test.

        Best-effort: problems are logged and reported as missing paths.

        Args:
            driver: Driver exposing the screenshot hook
            name: Base name for the artifacts

        Returns:
            Dict with 'screenshot' and 'report' paths (None where not written)
        """
        artifacts: Dict[str, Optional[str]] = {"screenshot": None, "report": None}
        if not self.enabled or not self._ensure_output_dir():
            return artifacts

        screenshot_path = os.path.join(self.run_output_dir, f"failed_{name}.png")
        try:
            driver.screenshot(screenshot_path)
            artifacts["screenshot"] = screenshot_path
            self.logger.info(f"Screenshot saved: {screenshot_path}")
        except Exception as e:
            self.logger.error(f"Failed to take screenshot for {name}: {e}")

        artifacts["report"] = self.save_report(f"failed_{name}_actions.json")
        return artifacts
