"""
Pod data processing utilities.

This module turns kubernetes client pod objects into the PodInfo view the
log engine works with. Containers are taken from the pod status, in the order
the status reports them, and flagged when they are still waiting to start.

Key Functions:
- get_container_state: Describe a container state as a string
- is_waiting: Whether a container has not started yet
- pod_to_info: Convert a Kubernetes pod object to PodInfo

Example:
    ```python
    info = pod_to_info(k8s_pod_object)
    print(f"Pod {info.name} has {len(info.containers)} containers")
    ```
"""

from typing import Any

from .models import ContainerInfo, PodInfo


def get_container_state(container_status: Any) -> str:
    """Get container state as a string."""
    state = container_status.state
    if state is None:
        return 'unknown'
    if state.running:
        return 'running'
    elif state.waiting:
        return f"waiting({state.waiting.reason})"
    elif state.terminated:
        return f"terminated({state.terminated.reason})"
    else:
        return 'unknown'


def is_waiting(container_status: Any) -> bool:
    """Running and terminated containers have logs; waiting ones have none yet."""
    state = container_status.state
    return bool(state is not None and state.waiting)


def pod_to_info(p: Any) -> PodInfo:
    """Convert Kubernetes pod object to PodInfo."""
    statuses = (p.status.container_statuses if p.status else None) or []
    return PodInfo(
        name=p.metadata.name,
        namespace=p.metadata.namespace,
        containers=[ContainerInfo(name=s.name, waiting=is_waiting(s)) for s in statuses],
    )
