# api/teams/teams_routes.py

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from config.database import get_db
from middlewares.auth_middleware import auth_middleware
from middlewares.role_middleware import manager_only
from utils.schema_base import Message
from utils.time_utils import Clock, get_clock
from api.teams.teams_schema import (
    TeamCreate,
    TeamUpdate,
    LeaderAssign,
    TeamMemberAdd,
    TeamOut,
    TeamDetailOut,
    TeamMemberOut,
)
from api.teams.teams_service import TeamService

router = APIRouter(prefix="/teams", tags=["teams"])


@router.get("", response_model=List[TeamOut])
def list_teams(db: Session = Depends(get_db), current_user: dict = Depends(auth_middleware)):
    return TeamService(db).list_teams()


@router.post("", response_model=TeamOut, status_code=status.HTTP_201_CREATED)
def create_team(
    payload: TeamCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(manager_only),
):
    service = TeamService(db, clock)
    return service.to_out(service.create_team(payload, current_user["id"]))


@router.get("/{team_id}", response_model=TeamDetailOut)
def get_team(team_id: int, db: Session = Depends(get_db), current_user: dict = Depends(auth_middleware)):
    service = TeamService(db)
    return service.to_out(service.get_team(team_id), with_members=True)


@router.put("/{team_id}", response_model=TeamOut, summary="Update a team; renaming renames its tags")
def update_team(
    team_id: int,
    payload: TeamUpdate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(manager_only),
):
    service = TeamService(db, clock)
    return service.to_out(service.update_team(team_id, payload))


@router.delete("/{team_id}", response_model=Message)
def delete_team(
    team_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(manager_only),
):
    TeamService(db, clock).delete_team(team_id, current_user["id"])
    return {"message": "Team deleted successfully"}


@router.put("/{team_id}/leader", response_model=TeamOut, summary="Set or clear the team leader")
def set_leader(
    team_id: int,
    payload: LeaderAssign,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(manager_only),
):
    service = TeamService(db, clock)
    return service.to_out(service.set_leader(team_id, payload.member_id, current_user["id"]))


@router.post("/{team_id}/members", response_model=TeamMemberOut, status_code=status.HTTP_201_CREATED)
def add_team_member(
    team_id: int,
    payload: TeamMemberAdd,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(manager_only),
):
    return TeamService(db, clock).add_member(team_id, payload.member_id, current_user["id"])


@router.delete("/{team_id}/members/{member_id}", response_model=Message)
def remove_team_member(
    team_id: int,
    member_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(manager_only),
):
    TeamService(db, clock).remove_member(team_id, member_id, current_user["id"])
    return {"message": "Member removed from team"}
