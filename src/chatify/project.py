from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from .lib.paths import resolve_path
from .logger import configure_logging
from .settings import CONFIG_FILE_NAME, DATA_DIR_NAME, Settings
from .settings.loader import load_settings
from .templates import write_default_config

if TYPE_CHECKING:
    from .semantic.embedder import Embedder


class Project:
    def __init__(
        self,
        base_path: Path,
        settings: Optional[Settings] = None,
        embedder: Optional["Embedder"] = None,
    ):
        self.base_path: Path = base_path
        self.settings: Settings = settings or Settings()
        # Explicit embedder for semantic tools; None uses the shared fastembed one.
        self.embedder: Optional["Embedder"] = embedder

    @property
    def data_dir(self) -> Path:
        return self.base_path / DATA_DIR_NAME

    @property
    def config_path(self) -> Path:
        return self.data_dir / CONFIG_FILE_NAME

    @property
    def todo_path(self) -> Path:
        return self.base_path / self.settings.todo.filename

    def resolve(self, path: Union[str, Path]) -> Path:
        """Resolve a user supplied path, refusing anything outside the project."""
        return resolve_path(self.base_path, path)

    def relpath(self, path: Union[str, Path]) -> str:
        p = Path(path)
        for base in (self.base_path, self.base_path.resolve()):
            if p.is_relative_to(base):
                return p.relative_to(base).as_posix()
        return str(p)

    @classmethod
    def from_base_path(
        cls,
        base_path: Union[str, Path],
        *,
        search_ancestors: bool = True,
    ) -> "Project":
        return init_project(base_path, search_ancestors=search_ancestors)


def _find_project_root_with_config(start: Path, rel_config: Path) -> Optional[Path]:
    """
    Walk upwards from 'start' looking for rel_config (e.g. '.chatify/config.yaml').
    Returns the directory that contains it, or None.
    """
    current = start
    while True:
        if (current / rel_config).is_file():
            return current
        if current.parent == current:
            return None
        current = current.parent


def init_project(
    base_path: Union[str, Path],
    *,
    search_ancestors: bool = True,
) -> Project:
    """
    Initialize a Project by:
    1) Searching upwards for an existing .chatify/config.yaml if search_ancestors is True.
    2) Otherwise creating a default one in the provided start directory.
    """
    start_path = Path(base_path)
    start_dir = start_path if start_path.is_dir() else start_path.parent
    start_dir = start_dir.resolve()

    rel = Path(DATA_DIR_NAME) / CONFIG_FILE_NAME
    found_base = (
        _find_project_root_with_config(start_dir, rel) if search_ancestors else None
    )
    base = found_base if found_base is not None else start_dir
    config_path = base / rel
    if not config_path.exists():
        write_default_config(config_path)

    settings = load_settings(config_path)
    to_file = settings.logging is not None and settings.logging.to_file
    configure_logging(
        settings.logging,
        log_dir=(base / DATA_DIR_NAME) if to_file else None,
    )
    return Project(base_path=base, settings=settings)
