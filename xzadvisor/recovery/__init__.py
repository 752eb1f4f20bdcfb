from .integrity import (
    IntegrityStatus,
    RepairResult,
    integrity_report,
    repair,
    repair_file,
    verify,
    verify_file,
)
from .salvage import RecoveryAttempt, RecoveryEngine, RecoveryMode, RecoveryReport

__all__ = [
    "IntegrityStatus",
    "RepairResult",
    "integrity_report",
    "repair",
    "repair_file",
    "verify",
    "verify_file",
    "RecoveryAttempt",
    "RecoveryEngine",
    "RecoveryMode",
    "RecoveryReport",
]
