# chatrelay/routes/teams.py

from fastapi import APIRouter, Depends, Request

from chatrelay.routes.webhook import read_json_body
from chatrelay.services.teams_service import TeamsRelayService

router = APIRouter()


def get_teams_service(request: Request) -> TeamsRelayService:
    return request.app.state.teams_service


@router.post("/teams-webhook")
async def teams_webhook(
    request: Request,
    teams_service: TeamsRelayService = Depends(get_teams_service),
):
    body = await read_json_body(request)
    answer = await teams_service.handle(body)
    return {"message": answer}
