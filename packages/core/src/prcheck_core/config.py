import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "check_name": "prcheck",
    "stale_after_minutes": 10,
    "integrated_label": "integrated",
    "census_path": "census.yml",
    "census_project": None,  # None = first project listed in the census
    "issue_repo": None,  # owner/name of the issue tracker; None disables title normalization
    "store": "github",  # "github" (check runs) or "sqlite"
    "store_path": ".prcheck.db",
    "rules": [],  # shell commands run against the materialized change
    "seed_path": None,
    "max_retries": 2,
    "max_cycles": 10,
}


def load_config(config_path: str = ".prcheck.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prcheck.yml in the current directory
      3. CLI argument overrides
    """
    config = {**DEFAULT_CONFIG, "rules": list(DEFAULT_CONFIG["rules"])}

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    config["github_token"] = os.environ.get("GITHUB_TOKEN")

    return config
