"""Shared constants for TUI modules.

Centralizes the module catalog and the key hints used across screens.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ModuleInfo:
    """A course module as listed on the menu."""

    id: str
    title: str
    description: str
    status: str = "planned"  # ready, wip or planned
    has_lab: bool = False


MODULES: tuple[ModuleInfo, ...] = (
    ModuleInfo(
        "01-osi-model",
        "OSI Model Fundamentals",
        "Explore the 7 layers of the OSI model with a live packet capture lab",
        status="ready",
        has_lab=True,
    ),
    ModuleInfo(
        "02-tcp-ip",
        "TCP/IP Stack Deep Dive",
        "Handshakes, windows and retransmission in real traffic",
    ),
    ModuleInfo(
        "03-subnetting",
        "Subnetting and CIDR",
        "Address planning, masks and route summarization",
    ),
    ModuleInfo(
        "04-routing",
        "Routing Protocols",
        "Static routes, route tables and packet forwarding",
    ),
    ModuleInfo(
        "05-k8s-networking",
        "Kubernetes Networking",
        "Pods, Services and how traffic moves through a cluster",
    ),
    ModuleInfo(
        "06-cni",
        "Container Network Interface",
        "How CNI plugins wire containers into the network",
    ),
    ModuleInfo(
        "07-service-mesh",
        "Service Mesh Concepts",
        "Sidecars, mTLS and traffic policy",
    ),
)


def get_module(module_id: str) -> ModuleInfo | None:
    """Look up a module in the catalog."""
    for module in MODULES:
        if module.id == module_id:
            return module
    return None


def module_ids() -> list[str]:
    return [module.id for module in MODULES]


def progress_summary(modules: tuple[ModuleInfo, ...] = MODULES) -> str:
    """Menu footer line, e.g. "Progress: 1/7 modules ready"."""
    ready = sum(1 for module in modules if module.status == "ready")
    return f"Progress: {ready}/{len(modules)} modules ready"
