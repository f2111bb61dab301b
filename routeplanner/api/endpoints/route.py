import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from routeplanner.api.deps import get_route_assembler
from routeplanner.domain.assembly import RouteAssembler
from routeplanner.domain.exceptions import InvalidRequestError
from routeplanner.models.schemas import OptimizedRoute, RouteErrorResponse, RouteRequest

logger = logging.getLogger(__name__)

router = APIRouter()


def route_error(status_code: int, message: str) -> JSONResponse:
    payload = RouteErrorResponse(message=message)
    return JSONResponse(payload.model_dump(), status_code=status_code)


@router.post(
    "/optimize-route",
    response_model=OptimizedRoute,
    responses={400: {"model": RouteErrorResponse}, 500: {"model": RouteErrorResponse}},
)
async def optimize_route(
    request: RouteRequest,
    assembler: RouteAssembler = Depends(get_route_assembler),
):
    """Order the stops and attach estimates plus Google/Apple Maps links"""

    logger.info("Route request: mode=%s stops=%d", request.mode, len(request.stops))
    try:
        return assembler.assemble(request)
    except InvalidRequestError as exc:
        logger.info("Rejected route request: %s", exc.message)
        return route_error(exc.status_code, exc.message)
    except Exception as exc:
        logger.exception("Route optimization failed: %s", exc)
        return route_error(500, "Failed to optimize route")
