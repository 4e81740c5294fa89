"""Installing bundles into the target layout around the dependent process."""

from ._association import Association, InstalledApp, ManifestIndex, TextualManifestIndex
from ._coordinator import InstallCoordinator, InstallResult, UninstallResult
from ._in_memory import InMemoryProcessController
from ._layout import MANIFEST_DIR, SCRIPT_DIR, TargetLayout
from ._process import ProcessController, PsutilProcessController

__all__ = [
    "MANIFEST_DIR",
    "SCRIPT_DIR",
    "Association",
    "InMemoryProcessController",
    "InstallCoordinator",
    "InstallResult",
    "InstalledApp",
    "ManifestIndex",
    "ProcessController",
    "PsutilProcessController",
    "TargetLayout",
    "TextualManifestIndex",
    "UninstallResult",
]
