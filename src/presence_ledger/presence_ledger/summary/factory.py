from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from ..core.constants import (
    DEFAULT_AFTER_CUTOFF_MINUTES,
    DEFAULT_CUTOFF_HOUR,
    DEFAULT_EOD_HOUR,
    DEFAULT_EOD_MINUTE,
)
from ..core.exceptions import ValidationError
from .policies.base import AutoClosePolicy
from .policies.cap_only_policy import CapOnlyPolicy
from .policies.hybrid_policy import HybridPolicy
from .policies.leave_open_policy import LeaveOpenPolicy
from .policies.write_back_policy import WriteBackPolicy

_UNSET: Any = object()


@dataclass
class AutoClosePolicyFactory:
    """Factory Pattern: build the auto-close policy from options.

    Defaults come from configuration so every entry point closes days the same way.
    """

    cutoff_hour: int = DEFAULT_CUTOFF_HOUR
    eod_hour: int = DEFAULT_EOD_HOUR
    eod_minute: int = DEFAULT_EOD_MINUTE
    after_minutes: int = DEFAULT_AFTER_CUTOFF_MINUTES

    def hybrid(self, options: Optional[Mapping[str, Any]] = None) -> HybridPolicy:
        options = options or {}
        return HybridPolicy(
            cutoff_hour=options.get("cutoff_hour", self.cutoff_hour),
            eod_hour=options.get("eod_hour", self.eod_hour),
            eod_minute=options.get("eod_minute", self.eod_minute),
            after_minutes=options.get("after_minutes", self.after_minutes),
        )

    def from_options(
        self,
        *,
        close_open_at_hour: Optional[int] = _UNSET,
        auto_write_sign_out_at_hour: Optional[int] = None,
        auto_policy: Union[None, AutoClosePolicy, Mapping[str, Any]] = None,
    ) -> AutoClosePolicy:
        """Precedence: hybrid, then write-back, then cap-only, else leave open.

        ``close_open_at_hour`` defaults to the configured cutoff; pass None
        explicitly to leave open sessions without an estimate.
        """
        if isinstance(auto_policy, AutoClosePolicy):
            return auto_policy
        if auto_policy is not None:
            return self.hybrid(auto_policy)
        if auto_write_sign_out_at_hour is not None:
            return WriteBackPolicy(hour=auto_write_sign_out_at_hour)
        if close_open_at_hour is _UNSET:
            close_open_at_hour = self.cutoff_hour
        if close_open_at_hour is not None:
            return CapOnlyPolicy(hour=close_open_at_hour)
        return LeaveOpenPolicy()

    def from_name(self, name: Optional[str], *, hour: Optional[int] = None) -> AutoClosePolicy:
        """Resolve the short names used by the HTTP layer and scripts."""
        key = (name or "cap").strip().lower()
        if key in ("cap", "cap_only"):
            return CapOnlyPolicy(hour=self.cutoff_hour if hour is None else hour)
        if key in ("write", "write_back"):
            return WriteBackPolicy(hour=self.cutoff_hour if hour is None else hour)
        if key == "hybrid":
            return self.hybrid({} if hour is None else {"cutoff_hour": hour})
        if key in ("none", "open", "leave_open"):
            return LeaveOpenPolicy()
        raise ValidationError(f"Unknown auto-close policy {name!r}")
