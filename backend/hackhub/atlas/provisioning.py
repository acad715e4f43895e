import logging
import uuid

from sqlmodel import Session, col, select

from hackhub.atlas import utils
from hackhub.atlas.client import AtlasApiError, AtlasClient
from hackhub.models import (
    AtlasCluster,
    AtlasCredentials,
    AtlasProvisioningSettings,
    CleanupError,
    CleanupReport,
    CloudProvider,
    ClusterStatus,
    Event,
    get_datetime_utc,
)

logger = logging.getLogger(__name__)

INACTIVE_STATUSES = (ClusterStatus.deleted, ClusterStatus.error)


class ConflictError(Exception):
    pass


class ProvisioningDisabledError(ValueError):
    pass


def event_settings(event: Event) -> AtlasProvisioningSettings:
    return AtlasProvisioningSettings.model_validate(event.atlas_provisioning or {})


def active_cluster(*, session: Session, event_id: uuid.UUID, team_id: uuid.UUID) -> AtlasCluster | None:
    statement = select(AtlasCluster).where(
        AtlasCluster.event_id == event_id,
        AtlasCluster.team_id == team_id,
        col(AtlasCluster.status).not_in(INACTIVE_STATUSES),
    )
    return session.exec(statement).first()


async def provision_cluster(
    *,
    session: Session,
    client: AtlasClient,
    event: Event,
    team_id: uuid.UUID,
    project_id: uuid.UUID,
    user_id: uuid.UUID,
    provider: str | None = None,
    region: str | None = None,
) -> tuple[AtlasCluster, AtlasCredentials]:
    """
    Create an Atlas project holding one free M0 cluster for a team.

    Steps run in order: project, cluster, database user, then the IP access
    list when the event allows open network access. If any step fails the
    Atlas project is deleted again and the error is re-raised.
    """
    config = event_settings(event)
    if not config.enabled:
        raise ProvisioningDisabledError("Atlas cluster provisioning is not enabled for this event")
    if active_cluster(session=session, event_id=event.id, team_id=team_id):
        raise ConflictError("A cluster already exists for this team in this event")

    provider = CloudProvider(provider or config.default_provider)
    region = region or config.default_region
    name = utils.project_name(event.id, team_id)
    username = utils.team_username(team_id)
    password = utils.generate_password()
    ip_entries = (
        [{"cidrBlock": "0.0.0.0/0", "comment": "Hackathon open access"}]
        if config.open_network_access
        else []
    )

    group_id: str | None = None
    try:
        logger.info("Creating Atlas project %s", name)
        project = await client.create_project(name)
        group_id = project["id"]

        logger.info("Creating M0 cluster in Atlas project %s", group_id)
        cluster_response = await client.create_m0_cluster(
            group_id, name=utils.CLUSTER_NAME, provider=provider.value, region=region
        )

        logger.info("Creating database user %s", username)
        await client.create_database_user(
            group_id, username=username, password=password, cluster_name=utils.CLUSTER_NAME
        )

        if ip_entries:
            await client.add_access_list_entries(group_id, ip_entries)
    except Exception:
        logger.exception("Atlas provisioning failed for team %s", team_id)
        if group_id:
            try:
                logger.info("Rolling back Atlas project %s", group_id)
                await client.delete_project(group_id)
            except AtlasApiError as rollback_error:
                logger.error("Rollback of Atlas project %s failed: %s", group_id, rollback_error)
        raise

    now = get_datetime_utc()
    connection_strings = cluster_response.get("connectionStrings") or {}
    cluster = AtlasCluster(
        event_id=event.id,
        team_id=team_id,
        project_id=project_id,
        provisioned_by=user_id,
        atlas_project_id=group_id,
        atlas_project_name=name,
        atlas_cluster_name=utils.CLUSTER_NAME,
        atlas_cluster_id=cluster_response.get("id") or "",
        connection_string=utils.with_app_name(connection_strings.get("standardSrv") or ""),
        standard_connection_string=utils.with_app_name(connection_strings.get("standard") or ""),
        database_users=[
            {"username": username, "created_at": now.isoformat(), "created_by": str(user_id)}
        ],
        ip_access_list=[
            {
                "cidr_block": entry["cidrBlock"],
                "comment": entry["comment"],
                "added_at": now.isoformat(),
                "added_by": str(user_id),
            }
            for entry in ip_entries
        ],
        status=ClusterStatus.creating,
        provider_name=provider,
        region_name=region,
    )
    session.add(cluster)
    session.commit()
    session.refresh(cluster)
    logger.info("Cluster provisioning initiated: %s", cluster.id)
    return cluster, AtlasCredentials(username=username, password=password)


async def delete_cluster(*, session: Session, client: AtlasClient, cluster: AtlasCluster) -> None:
    """Delete the cluster's whole Atlas project and mark it deleted."""
    if cluster.status == ClusterStatus.deleted:
        return

    cluster.status = ClusterStatus.deleting
    session.add(cluster)
    session.commit()
    try:
        await client.delete_project(cluster.atlas_project_id)
    except AtlasApiError as exc:
        cluster.status = ClusterStatus.error
        cluster.error_message = f"Deletion failed: {exc.detail}"
        session.add(cluster)
        session.commit()
        raise

    cluster.status = ClusterStatus.deleted
    cluster.deleted_at = get_datetime_utc()
    session.add(cluster)
    session.commit()
    session.refresh(cluster)
    logger.info("Cluster deleted: %s", cluster.id)


async def refresh_status(*, session: Session, client: AtlasClient, cluster: AtlasCluster) -> str:
    """Pull the cluster state from Atlas. Returns the raw Atlas state name."""
    if cluster.status == ClusterStatus.deleted:
        return "DELETED"

    try:
        remote = await client.get_cluster(cluster.atlas_project_id, cluster.atlas_cluster_name)
    except AtlasApiError as exc:
        cluster.status = ClusterStatus.error
        cluster.error_message = f"Status check failed: {exc.detail}"
        cluster.last_status_check = get_datetime_utc()
        session.add(cluster)
        session.commit()
        raise

    state = remote.get("stateName") or ""
    connection_strings = remote.get("connectionStrings") or {}
    cluster.status = utils.map_atlas_state(state)
    cluster.connection_string = utils.with_app_name(
        connection_strings.get("standardSrv") or cluster.connection_string
    )
    cluster.standard_connection_string = utils.with_app_name(
        connection_strings.get("standard") or cluster.standard_connection_string
    )
    cluster.mongodb_version = remote.get("mongoDBVersion") or ""
    cluster.error_message = None
    cluster.last_status_check = get_datetime_utc()
    session.add(cluster)
    session.commit()
    session.refresh(cluster)
    logger.info("Status refreshed for %s: %s -> %s", cluster.id, state, cluster.status.value)
    return state


async def add_database_user(
    *, session: Session, client: AtlasClient, cluster: AtlasCluster, username: str, user_id: uuid.UUID
) -> AtlasCredentials:
    if any(u.get("username") == username for u in cluster.database_users or []):
        raise ConflictError(f"Database user {username} already exists")
    password = utils.generate_password()
    await client.create_database_user(
        cluster.atlas_project_id,
        username=username,
        password=password,
        cluster_name=cluster.atlas_cluster_name,
    )
    cluster.database_users = [
        *(cluster.database_users or []),
        {"username": username, "created_at": get_datetime_utc().isoformat(), "created_by": str(user_id)},
    ]
    session.add(cluster)
    session.commit()
    session.refresh(cluster)
    return AtlasCredentials(username=username, password=password)


async def remove_database_user(
    *, session: Session, client: AtlasClient, cluster: AtlasCluster, username: str
) -> None:
    users = cluster.database_users or []
    if not any(u.get("username") == username for u in users):
        raise LookupError(f"Database user {username} not found")
    await client.delete_database_user(cluster.atlas_project_id, username)
    cluster.database_users = [u for u in users if u.get("username") != username]
    session.add(cluster)
    session.commit()
    session.refresh(cluster)


async def add_ip_access(
    *,
    session: Session,
    client: AtlasClient,
    cluster: AtlasCluster,
    cidr_block: str,
    comment: str,
    user_id: uuid.UUID,
) -> None:
    entries = cluster.ip_access_list or []
    if any(e.get("cidr_block") == cidr_block for e in entries):
        raise ConflictError(f"{cidr_block} is already on the access list")
    await client.add_access_list_entries(
        cluster.atlas_project_id, [{"cidrBlock": cidr_block, "comment": comment}]
    )
    cluster.ip_access_list = [
        *entries,
        {
            "cidr_block": cidr_block,
            "comment": comment,
            "added_at": get_datetime_utc().isoformat(),
            "added_by": str(user_id),
        },
    ]
    session.add(cluster)
    session.commit()
    session.refresh(cluster)


async def remove_ip_access(
    *, session: Session, client: AtlasClient, cluster: AtlasCluster, cidr_block: str
) -> None:
    entries = cluster.ip_access_list or []
    if not any(e.get("cidr_block") == cidr_block for e in entries):
        raise LookupError(f"{cidr_block} is not on the access list")
    await client.delete_access_list_entry(cluster.atlas_project_id, cidr_block)
    cluster.ip_access_list = [e for e in entries if e.get("cidr_block") != cidr_block]
    session.add(cluster)
    session.commit()
    session.refresh(cluster)


async def cleanup_event_clusters(*, session: Session, client: AtlasClient, event: Event) -> CleanupReport:
    """Delete every live cluster of an event whose settings ask for cleanup."""
    report = CleanupReport(event_id=event.id, event_name=event.name, clusters_found=0, clusters_deleted=0)
    if not event_settings(event).auto_cleanup_on_event_end:
        logger.info("Auto-cleanup disabled for event %s, skipping", event.id)
        return report

    clusters = session.exec(
        select(AtlasCluster).where(
            AtlasCluster.event_id == event.id,
            col(AtlasCluster.status).not_in((ClusterStatus.deleted, ClusterStatus.deleting)),
        )
    ).all()
    report.clusters_found = len(clusters)
    logger.info("Cleaning up %s clusters for event %s", len(clusters), event.name)

    for cluster in clusters:
        try:
            await delete_cluster(session=session, client=client, cluster=cluster)
            report.clusters_deleted += 1
        except AtlasApiError as exc:
            report.errors.append(CleanupError(cluster_id=cluster.id, error=str(exc)))
            logger.error("Failed to delete cluster %s: %s", cluster.id, exc)

    logger.info(
        "Cleanup for event %s complete: %s/%s deleted",
        event.name,
        report.clusters_deleted,
        report.clusters_found,
    )
    return report
