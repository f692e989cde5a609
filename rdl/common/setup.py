import os
from pathlib import Path
from dataclasses import dataclass

# Lil helper to create a directory (and parents) if it doesn't exist yet.
def ensure_directory(path: Path):
    path.mkdir(parents=True,exist_ok=True)
    return path

# Picks the user data folder. RDL_HOME wins (handy for tests and portable installs), then APPDATA on Windows,
# then a dot folder in the home directory everywhere else.
def _resolve_data_dir() -> Path:
    override = os.getenv("RDL_HOME")
    if override:
        return Path(override)
    appdata = os.getenv("APPDATA")
    if appdata:
        return Path(appdata) / "RideDataLogger"
    return Path.home() / ".ridedatalogger"

# Dataclass for accessing paths across program.
@dataclass(frozen=False)
class ProjectPaths:

    data: Path
    logs: Path
    exports: Path
    config_file: Path

    @staticmethod
    def build():
        # Folder for all user-specific files: config, logs and exported reports
        data = ensure_directory(_resolve_data_dir())

        logs = ensure_directory(data / "logs")
        exports = ensure_directory(data / "exports")

        return ProjectPaths(
            data = data,
            logs = logs,
            exports = exports,
            config_file = data / "config.json",
        )
PATHS = ProjectPaths.build()
