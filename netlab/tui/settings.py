"""Project settings loader.

Reads NetLab configuration from .netlab.yaml in the project root so a
checkout can point at a different lab script, relax timeouts on slow
machines, or move exported logs.

Example .netlab.yaml:
    netlab:
      lab_script: ./scripts/k8s_lab.sh
      capture_artifact: modules/01-osi-model/assets/https-nginx.pcap
      logs_dir: ./logs
      probe_timeout: 5
      workflow_timeout: 900
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

SETTINGS_FILE = ".netlab.yaml"


@dataclass
class NetLabSettings:
    """NetLab configuration settings."""

    # Lab workflow script, invoked as "<lab_script> setup|cleanup|capture"
    lab_script: str = "./scripts/k8s_lab.sh"

    # File whose existence confirms a successful lab setup
    capture_artifact: str = "modules/01-osi-model/assets/https-nginx.pcap"

    # Where exported lab output logs are written
    logs_dir: str = "./logs"

    # Seconds allowed for each tool's version check
    probe_timeout: float = 5.0

    # Seconds before a running lab script is killed
    workflow_timeout: float = 900.0

    # Smallest terminal the screens will draw into
    min_width: int = 60
    min_height: int = 20

    @classmethod
    def load(cls, project_root: Path | None = None) -> "NetLabSettings":
        """Load settings from .netlab.yaml in project root.

        Args:
            project_root: Project root directory. Defaults to cwd.

        Returns:
            NetLabSettings with values from config file or defaults.
        """
        root = project_root or Path.cwd()
        config_path = root / SETTINGS_FILE

        if not config_path.exists():
            return cls()

        try:
            with open(config_path, encoding="utf-8") as f:
                config = yaml.safe_load(f) or {}

            section = config.get("netlab", {}) or {}
            defaults = cls()
            values = {}
            for setting in fields(cls):
                default = getattr(defaults, setting.name)
                raw = section.get(setting.name, default)
                values[setting.name] = type(default)(raw)
            return cls(**values)
        except (OSError, yaml.YAMLError, AttributeError, TypeError, ValueError) as e:
            logger.warning("Ignoring malformed %s: %s", config_path, e)
            return cls()

