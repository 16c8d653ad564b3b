from pathlib import Path


DEFAULT_CONFIG = """\
# chatify project configuration.
#
# Variables may be referenced as ${NAME} or ${env:NAME}; other files can be
# merged in with `$include: path/or/glob.yaml`.

tools:
  - apply_patch
  - edit
  - write
  - read
  - todowrite
  - todoread
  - semantic_index
  - semantic_search
  - batch

semantic:
  model_name: sentence-transformers/all-MiniLM-L6-v2
  default_mode: changed
  # max_targets: 2000
  # max_bytes: 52428800

search:
  default_limit: 5

logging:
  default_level: info
  enabled_loggers:
    fastembed: warning
"""


def write_default_config(config_path: Path) -> None:
    """Write the default config file, creating its directory."""
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(DEFAULT_CONFIG, encoding="utf-8")
