# tenant_admin/services/app_list.py
"""
Reconcile an organization's provisioned apps against a desired list of app nids.

Every active instance whose nid is still wanted is kept, every other active
instance is terminated, and each wanted nid left over gets a new instance.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Tuple

from tenant_admin.db.hub import HubClient
from tenant_admin.models.organization import AppInstance, Organization

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppListPlan:
    keep: Tuple[AppInstance, ...]
    terminate: Tuple[AppInstance, ...]
    provision: Tuple[str, ...]


def plan_app_list(existing: Iterable[AppInstance], desired_nids: Iterable[str]) -> AppListPlan:
    remaining = list(dict.fromkeys(desired_nids))
    keep, terminate = [], []
    for instance in existing:
        if not instance.active:
            continue
        if instance.nid in remaining:
            # a second active instance of the same app is terminated
            remaining.remove(instance.nid)
            keep.append(instance)
        else:
            terminate.append(instance)
    return AppListPlan(keep=tuple(keep), terminate=tuple(terminate), provision=tuple(remaining))


async def terminate_app_instance(hub: HubClient, instance: AppInstance) -> None:
    logger.info("Terminating app instance %s (%s)", instance.id, instance.nid)
    await hub.perform("DELETE", f"app_instances/{instance.id}/terminate")


async def provision_app_instance(hub: HubClient, organization: Organization, nid: str) -> None:
    logger.info("Provisioning app %s for organization %s", nid, organization.id)
    await hub.perform(
        "POST",
        "app_instances/provision",
        attributes={"app_nid": nid, "owner_id": organization.id, "owner_type": "Organization"},
        resource="app_instances",
    )


async def reconcile_app_list(hub: HubClient, organization: Organization, desired_nids: Iterable[str]) -> AppListPlan:
    """
    Terminate then provision according to plan_app_list. Hub errors propagate
    as-is; steps already performed are not rolled back.
    """
    plan = plan_app_list(organization.active_app_instances(), desired_nids)
    for instance in plan.terminate:
        await terminate_app_instance(hub, instance)
    for nid in plan.provision:
        await provision_app_instance(hub, organization, nid)
    return plan
