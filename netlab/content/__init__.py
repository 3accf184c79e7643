"""Course content for NetLab modules.

Content is plain data. Screens decide how to render it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from netlab.content.osi import (
    KUBERNETES_CONTEXT,
    MNEMONIC_MAPPING,
    MNEMONICS,
    OSI_LAYERS,
    SAMPLE_PACKET_LAYERS,
    OSILayer,
    PacketLayer,
    layer_by_number,
    load_packet_layers,
)


@dataclass(frozen=True)
class ModuleContent:
    """What the content explorer needs to show one module."""

    module_id: str
    title: str
    breadcrumb: str
    topics: Tuple[OSILayer, ...]
    has_lab: bool = False
    lab_title: str = ""


CONTENT: Dict[str, ModuleContent] = {
    "01-osi-model": ModuleContent(
        module_id="01-osi-model",
        title="NetLab OSI Model - Interactive Layer Explorer",
        breadcrumb="NetLab > Fundamentals > OSI Model",
        topics=OSI_LAYERS,
        has_lab=True,
        lab_title="NetLab OSI Model - Packet Analysis Lab",
    ),
}


def get_module_content(module_id: str) -> Optional[ModuleContent]:
    """Return the content for a module, or None if it has none yet."""
    return CONTENT.get(module_id)


__all__ = [
    "CONTENT",
    "KUBERNETES_CONTEXT",
    "MNEMONICS",
    "MNEMONIC_MAPPING",
    "OSI_LAYERS",
    "SAMPLE_PACKET_LAYERS",
    "ModuleContent",
    "OSILayer",
    "PacketLayer",
    "get_module_content",
    "layer_by_number",
    "load_packet_layers",
]
