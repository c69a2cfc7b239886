"""Context variables for structured logging."""

from contextvars import ContextVar
from typing import Dict, Optional

_run_id: ContextVar[str] = ContextVar("run_id", default="")
_stage_name: ContextVar[str] = ContextVar("stage_name", default="")
_platform: ContextVar[str] = ContextVar("platform", default="")
_node_version: ContextVar[str] = ContextVar("node_version", default="")


def set_log_context(
    run_id: Optional[str] = None,
    stage: Optional[str] = None,
    platform: Optional[str] = None,
    node_version: Optional[str] = None,
) -> None:
    if run_id is not None:
        _run_id.set(run_id)
    if stage is not None:
        _stage_name.set(stage)
    if platform is not None:
        _platform.set(platform)
    if node_version is not None:
        _node_version.set(node_version)


def get_log_context() -> Dict[str, str]:
    return {
        "run_id": _run_id.get(),
        "stage": _stage_name.get(),
        "platform": _platform.get(),
        "node_version": _node_version.get(),
    }


def clear_log_context() -> None:
    _run_id.set("")
    _stage_name.set("")
    _platform.set("")
    _node_version.set("")
