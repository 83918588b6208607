from __future__ import annotations

import json
import sys
from typing import Optional

from tableprojector.cli.utils import load_cli_mapping
from tableprojector.config.workspace import WorkspaceContext
from tableprojector.projection.projector import TableProjector


def handle(*, mapping_path: Optional[str], workspace: Optional[WorkspaceContext] = None) -> None:
    projector = TableProjector(load_cli_mapping(mapping_path, workspace))
    json.dump([column.to_dict() for column in projector.columns], sys.stdout, indent=2)
    sys.stdout.write("\n")
