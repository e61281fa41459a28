from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter(prefix="/media", tags=["media"])


@router.get("/{name:path}", response_class=PlainTextResponse, deprecated=True)
async def legacy_media(name: str) -> PlainTextResponse:
    """Old media proxy; files are served from the static ``/media`` mount now."""
    return PlainTextResponse(
        "Media route deprecated. Use /media/* static paths.",
        status_code=410,
    )
