"""
Policy for pathkit operations.

Loads the YAML configuration, decides which targets are protected, which
actions need explicit approval, and which delete options apply by default.
"""

import fnmatch
import os
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Any, Callable, Dict, List, Optional, Set

import yaml

from .logger import AuditLogger, ActionType, ActionStatus
from .options import DeleteOption, parse_options


def _as_list(value: Any, default: List[str]) -> List[str]:
    """A YAML scalar becomes a one-item list; a missing or null value the default."""
    if value is None:
        return list(default)
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


@dataclass
class ActionRequest:
    """A request to perform an operation on a path."""
    action_type: str
    description: str
    target: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None

    def matches_pattern(self, pattern: str) -> bool:
        """Check if the action type matches a glob pattern."""
        return fnmatch.fnmatch(self.action_type, pattern)


@dataclass
class ActionResult:
    """Verdict on an ActionRequest."""
    success: bool
    status: str
    message: Optional[str] = None
    dry_run: bool = False


class PathPolicy:
    """
    Gatekeeper for operations done through the PathOperator.

    Protected targets are always refused. Actions matching a
    ``require_approval`` pattern are passed to the approval callback and
    refused when no callback is set.
    """

    def __init__(
        self,
        config_path: str = "pathkit.yaml",
        logger: Optional[AuditLogger] = None
    ):
        """
        Args:
            config_path: Path to the YAML configuration file
            logger: AuditLogger for policy decisions
        """
        self.config_path = Path(config_path)
        self.logger = logger or AuditLogger()

        self.config = self._load_config()

        self.protected: List[str] = []
        self.require_approval: List[str] = []
        self.default_options: Set[DeleteOption] = set()

        self._apply_config()

        self._approval_callback: Optional[Callable[[str, str], bool]] = None

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from the YAML file, falling back to defaults."""
        if not self.config_path.exists():
            return self._default_config()

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError):
            return self._default_config()
        if not isinstance(config, dict):
            return self._default_config()
        return config.get("pathkit", config)

    def _default_config(self) -> Dict[str, Any]:
        return {
            "delete": {
                "options": [],
            },
            "protected": [
                "/",
                "/*",
                str(Path.home()),
                "C:\\",
                "C:\\*",
            ],
            "require_approval": [
                "delete_tree",
            ],
        }

    def _apply_config(self) -> None:
        defaults = self._default_config()
        self.protected = _as_list(self.config.get("protected"), defaults["protected"])
        self.require_approval = _as_list(self.config.get("require_approval"), defaults["require_approval"])
        delete = self.config.get("delete") or {}
        if not isinstance(delete, dict):
            delete = {}
        self.default_options = parse_options(_as_list(delete.get("options"), []))

    def delete_options(self) -> Set[DeleteOption]:
        """Delete options applied when the caller passes none."""
        return set(self.default_options)

    def set_approval_callback(self, callback: Callable[[str, str], bool]) -> None:
        """
        Set the function that asks for approval.

        Args:
            callback: Takes (action_description, preview) and returns True
                if the action may proceed
        """
        self._approval_callback = callback

    def check(self, action: ActionRequest, dry_run: bool = False) -> ActionResult:
        """
        Decide whether an action may run.

        Protected targets are denied first. A dry-run is then allowed
        without approval, since it changes nothing. Remaining actions that
        match ``require_approval`` go through the approval callback.

        Args:
            action: The request to check
            dry_run: True if the caller only previews the action

        Returns:
            ActionResult with the verdict
        """
        if self.is_protected(action.target):
            self.logger.log_action(
                action_type=ActionType.POLICY,
                description=f"BLOCKED: {action.description}",
                target=action.target,
                status=ActionStatus.DENIED,
                result="Protected path"
            )
            return ActionResult(
                success=False,
                status="DENIED",
                message="This path is protected and cannot be modified.",
                dry_run=dry_run
            )

        if dry_run:
            return ActionResult(
                success=True,
                status="DRY_RUN",
                message="Dry-run mode - action will be previewed only.",
                dry_run=True
            )

        if any(action.matches_pattern(p) for p in self.require_approval):
            return self._request_approval(action)

        return ActionResult(success=True, status="APPROVED", message="Action permitted.")

    def is_protected(self, target: Optional[str]) -> bool:
        """
        Check if a target path matches a protected pattern.

        Patterns follow PurePath.match() rules, so "/*" protects the direct
        children of the root but nothing deeper.
        """
        if not target:
            return False
        candidate = os.path.abspath(target)
        for pattern in self.protected:
            if candidate == os.path.normpath(pattern):
                return True
            if PurePath(candidate).match(pattern):
                return True
        return False

    def _request_approval(self, action: ActionRequest) -> ActionResult:
        if self._approval_callback is None:
            self.logger.log_action(
                action_type=ActionType.POLICY,
                description=f"No approval available: {action.description}",
                target=action.target,
                status=ActionStatus.DENIED
            )
            return ActionResult(
                success=False,
                status="DENIED",
                message="Approval required but no approval callback is set."
            )

        preview = self._generate_preview(action)
        approved = self._approval_callback(action.description, preview)

        status = ActionStatus.APPROVED if approved else ActionStatus.DENIED
        self.logger.log_action(
            action_type=ActionType.POLICY,
            description=f"User {'approved' if approved else 'denied'}: {action.description}",
            target=action.target,
            status=status,
            metadata={"preview": preview}
        )

        return ActionResult(
            success=approved,
            status=status.name,
            message="Action approved by user." if approved else "Action denied by user."
        )

    def _generate_preview(self, action: ActionRequest) -> str:
        lines = []

        if action.action_type.startswith("delete"):
            lines.append(f"This will DELETE: {action.target}")
        elif action.action_type.startswith("set_read_only"):
            lines.append(f"This will change attributes of: {action.target}")
        else:
            lines.append(f"This will perform: {action.description}")

        if action.parameters:
            lines.append("")
            lines.append("Parameters:")
            for key, value in action.parameters.items():
                lines.append(f"  - {key}: {value}")

        return "\n".join(lines)

    def add_protected(self, pattern: str) -> None:
        """Add a protected path pattern."""
        if pattern not in self.protected:
            self.protected.append(pattern)
            self.logger.log_action(
                action_type=ActionType.POLICY,
                description=f"Protected: {pattern}",
                status=ActionStatus.EXECUTED
            )

    def remove_protected(self, pattern: str) -> bool:
        """
        Remove a protected path pattern.

        Returns:
            True if removed, False if it was not protected
        """
        if pattern in self.protected:
            self.protected.remove(pattern)
            self.logger.log_action(
                action_type=ActionType.POLICY,
                description=f"Unprotected: {pattern}",
                status=ActionStatus.EXECUTED
            )
            return True
        return False

    def save_config(self) -> None:
        """Write the current policy back to the YAML file."""
        section = {
            "delete": {"options": sorted(o.name for o in self.default_options)},
            "protected": self.protected,
            "require_approval": self.require_approval,
        }
        config: Dict[str, Any] = {"pathkit": section}

        if self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    existing = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError):
                existing = {}
            if isinstance(existing, dict) and "pathkit" in existing:
                existing["pathkit"] = section
                config = existing

        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.dump(config, f, default_flow_style=False)
