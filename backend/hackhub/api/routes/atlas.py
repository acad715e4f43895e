import logging
import uuid
from typing import Any

from fastapi import APIRouter, HTTPException
from sqlmodel import col, select

from hackhub import crud
from hackhub.api.deps import AdminUser, AtlasClientDep, CurrentUser, EventDep, SessionDep, StaffUser
from hackhub.atlas import provisioning
from hackhub.atlas.client import AtlasApiError
from hackhub.models import (
    AtlasCluster,
    AtlasClusterPublic,
    AtlasClustersPublic,
    AtlasCredentials,
    AtlasProvisioningSettings,
    CleanupReport,
    ClusterProvisionRequest,
    ClusterStatus,
    DatabaseUserCreate,
    Event,
    EventPublic,
    IpAccessCreate,
    Message,
    Project,
    ProvisionedCluster,
    Team,
    TeamMember,
    User,
)

router = APIRouter(tags=["atlas"])
logger = logging.getLogger(__name__)


def atlas_error(exc: AtlasApiError) -> HTTPException:
    return HTTPException(status_code=502, detail=f"Atlas API error: {exc.detail}")


def get_cluster_or_404(session: SessionDep, cluster_id: uuid.UUID) -> AtlasCluster:
    cluster = session.get(AtlasCluster, cluster_id)
    if not cluster:
        raise HTTPException(status_code=404, detail="Cluster not found")
    return cluster


def check_cluster_access(
    session: SessionDep, cluster: AtlasCluster, user: User, *, leader_only: bool = False
) -> None:
    if user.is_staff:
        return
    if leader_only:
        team = session.get(Team, cluster.team_id)
        if not team or team.leader_id != user.id:
            raise HTTPException(status_code=403, detail="Only the team leader can manage this cluster")
        return
    membership = crud.get_membership(session=session, event_id=cluster.event_id, user_id=user.id)
    if not membership or membership.team_id != cluster.team_id:
        raise HTTPException(status_code=403, detail="Not authorized to access this cluster")


@router.post("/atlas/clusters", response_model=ProvisionedCluster)
async def create_cluster(
    *,
    session: SessionDep,
    client: AtlasClientDep,
    current_user: CurrentUser,
    body: ClusterProvisionRequest,
) -> Any:
    """
    Provision a free M0 cluster for the current user's team. The database
    password is only returned by this call.
    """
    event = session.get(Event, body.event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    membership = crud.get_membership(session=session, event_id=event.id, user_id=current_user.id)
    if not membership:
        raise HTTPException(status_code=400, detail="You must be on a team to provision a cluster")
    team = session.get(Team, membership.team_id)
    if not team or team.leader_id != current_user.id:
        raise HTTPException(status_code=403, detail="Only the team leader can provision a cluster")
    project = session.exec(
        select(Project).where(Project.event_id == event.id, Project.team_id == team.id)
    ).first()
    if not project:
        raise HTTPException(status_code=400, detail="Your team must create a project first")

    try:
        cluster, credentials = await provisioning.provision_cluster(
            session=session,
            client=client,
            event=event,
            team_id=team.id,
            project_id=project.id,
            user_id=current_user.id,
            provider=body.provider.value if body.provider else None,
            region=body.region,
        )
    except provisioning.ProvisioningDisabledError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except provisioning.ConflictError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except AtlasApiError as exc:
        raise atlas_error(exc)
    return ProvisionedCluster.model_validate(cluster, update={"initial_credentials": credentials})


@router.get("/atlas/clusters", response_model=AtlasClustersPublic)
def read_my_clusters(session: SessionDep, current_user: CurrentUser) -> Any:
    """
    Clusters of every team the current user belongs to.
    """
    team_ids = [
        m.team_id
        for m in session.exec(select(TeamMember).where(TeamMember.user_id == current_user.id)).all()
    ]
    if not team_ids:
        return AtlasClustersPublic(data=[], count=0)
    clusters = session.exec(
        select(AtlasCluster)
        .where(col(AtlasCluster.team_id).in_(team_ids), AtlasCluster.status != ClusterStatus.deleted)
        .order_by(col(AtlasCluster.created_at).desc())
    ).all()
    return AtlasClustersPublic(data=clusters, count=len(clusters))


@router.get("/atlas/clusters/{cluster_id}", response_model=AtlasClusterPublic)
def read_cluster(session: SessionDep, cluster_id: uuid.UUID, current_user: CurrentUser) -> Any:
    cluster = get_cluster_or_404(session, cluster_id)
    check_cluster_access(session, cluster, current_user)
    return cluster


@router.get("/atlas/clusters/{cluster_id}/status", response_model=AtlasClusterPublic)
async def read_cluster_status(
    session: SessionDep, client: AtlasClientDep, cluster_id: uuid.UUID, current_user: CurrentUser
) -> Any:
    cluster = get_cluster_or_404(session, cluster_id)
    check_cluster_access(session, cluster, current_user)
    try:
        await provisioning.refresh_status(session=session, client=client, cluster=cluster)
    except AtlasApiError as exc:
        raise atlas_error(exc)
    return cluster


@router.delete("/atlas/clusters/{cluster_id}", response_model=Message)
async def delete_cluster(
    session: SessionDep, client: AtlasClientDep, cluster_id: uuid.UUID, current_user: CurrentUser
) -> Any:
    cluster = get_cluster_or_404(session, cluster_id)
    check_cluster_access(session, cluster, current_user, leader_only=True)
    try:
        await provisioning.delete_cluster(session=session, client=client, cluster=cluster)
    except AtlasApiError as exc:
        raise atlas_error(exc)
    return Message(message="Cluster deleted successfully")


@router.post("/atlas/clusters/{cluster_id}/database-users", response_model=AtlasCredentials)
async def create_database_user(
    *,
    session: SessionDep,
    client: AtlasClientDep,
    cluster_id: uuid.UUID,
    current_user: CurrentUser,
    body: DatabaseUserCreate,
) -> Any:
    cluster = get_cluster_or_404(session, cluster_id)
    check_cluster_access(session, cluster, current_user, leader_only=True)
    try:
        return await provisioning.add_database_user(
            session=session,
            client=client,
            cluster=cluster,
            username=body.username,
            user_id=current_user.id,
        )
    except provisioning.ConflictError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except AtlasApiError as exc:
        raise atlas_error(exc)


@router.delete("/atlas/clusters/{cluster_id}/database-users/{username}", response_model=Message)
async def delete_database_user(
    session: SessionDep,
    client: AtlasClientDep,
    cluster_id: uuid.UUID,
    username: str,
    current_user: CurrentUser,
) -> Any:
    cluster = get_cluster_or_404(session, cluster_id)
    check_cluster_access(session, cluster, current_user, leader_only=True)
    try:
        await provisioning.remove_database_user(
            session=session, client=client, cluster=cluster, username=username
        )
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except AtlasApiError as exc:
        raise atlas_error(exc)
    return Message(message=f"Database user {username} deleted")


@router.post("/atlas/clusters/{cluster_id}/ip-access", response_model=AtlasClusterPublic)
async def create_ip_access(
    *,
    session: SessionDep,
    client: AtlasClientDep,
    cluster_id: uuid.UUID,
    current_user: CurrentUser,
    body: IpAccessCreate,
) -> Any:
    cluster = get_cluster_or_404(session, cluster_id)
    check_cluster_access(session, cluster, current_user, leader_only=True)
    try:
        await provisioning.add_ip_access(
            session=session,
            client=client,
            cluster=cluster,
            cidr_block=body.cidr_block,
            comment=body.comment,
            user_id=current_user.id,
        )
    except provisioning.ConflictError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except AtlasApiError as exc:
        raise atlas_error(exc)
    return cluster


@router.delete("/atlas/clusters/{cluster_id}/ip-access/{cidr_block:path}", response_model=AtlasClusterPublic)
async def delete_ip_access(
    session: SessionDep,
    client: AtlasClientDep,
    cluster_id: uuid.UUID,
    cidr_block: str,
    current_user: CurrentUser,
) -> Any:
    cluster = get_cluster_or_404(session, cluster_id)
    check_cluster_access(session, cluster, current_user, leader_only=True)
    try:
        await provisioning.remove_ip_access(
            session=session, client=client, cluster=cluster, cidr_block=cidr_block
        )
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except AtlasApiError as exc:
        raise atlas_error(exc)
    return cluster


@router.put("/admin/events/{event_id}/atlas-provisioning", response_model=EventPublic)
def update_atlas_settings(
    *, session: SessionDep, event: EventDep, current_user: StaffUser, body: AtlasProvisioningSettings
) -> Any:
    event.atlas_provisioning = body.model_dump(mode="json")
    session.add(event)
    session.commit()
    session.refresh(event)
    return event


@router.get("/atlas/admin/clusters", response_model=AtlasClustersPublic)
def read_all_clusters(
    session: SessionDep,
    current_user: AdminUser,
    event_id: uuid.UUID | None = None,
    status: ClusterStatus | None = None,
    skip: int = 0,
    limit: int = 100,
) -> Any:
    statement = select(AtlasCluster)
    if event_id:
        statement = statement.where(AtlasCluster.event_id == event_id)
    if status:
        statement = statement.where(AtlasCluster.status == status)
    clusters = session.exec(statement.order_by(col(AtlasCluster.created_at).desc())).all()
    return AtlasClustersPublic(data=clusters[skip : skip + limit], count=len(clusters))


@router.delete("/atlas/admin/clusters/{cluster_id}", response_model=Message)
async def admin_delete_cluster(
    session: SessionDep, client: AtlasClientDep, cluster_id: uuid.UUID, current_user: AdminUser
) -> Any:
    cluster = get_cluster_or_404(session, cluster_id)
    try:
        await provisioning.delete_cluster(session=session, client=client, cluster=cluster)
    except AtlasApiError as exc:
        raise atlas_error(exc)
    logger.info("Admin %s deleted cluster %s", current_user.id, cluster.id)
    return Message(message="Cluster deleted successfully")


@router.post("/atlas/admin/cleanup", response_model=CleanupReport)
async def cleanup_clusters(
    session: SessionDep, client: AtlasClientDep, event_id: uuid.UUID, current_user: AdminUser
) -> Any:
    """
    Delete every live cluster of an event, as done automatically when it concludes.
    """
    event = session.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return await provisioning.cleanup_event_clusters(session=session, client=client, event=event)
