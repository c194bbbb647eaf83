from __future__ import annotations

from cachetools.func import lru_cache  # type: ignore

from ocpdeploy.infra.k8s.controller import ClusterController


@lru_cache(maxsize=1)
def get_cluster_controller(poll_interval: float | None = None) -> ClusterController:
    """Get an instance of the ClusterController.

    Returns:
        An instance of ClusterController backed by kr8s
    """
    from ocpdeploy.infra.k8s.kr8s_controller import Kr8sController

    if poll_interval is None:
        return Kr8sController()
    return Kr8sController(poll_interval=poll_interval)
