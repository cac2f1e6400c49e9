"""API routes for listing users."""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from resource_query.api.query_params import parse_bracket_query
from resource_query.db.database import get_session_maker
from resource_query.schemas.search import parse_query_options
from resource_query.services.user import UserService

router = APIRouter()


def get_user_service(
    session_maker: async_sessionmaker[AsyncSession] = Depends(get_session_maker),
) -> UserService:
    return UserService(session_maker)


@router.get("")
async def list_users(
    request: Request,
    service: UserService = Depends(get_user_service),
):
    """List users with filtering, search, sorting and pagination.

    Examples:
        GET /users?filter[role][eq]=admin
        GET /users?filter[is_active][eq]=true&search=john&sort=-created_at
        GET /users?filter[role][inArray]=admin,user&limit=50&page=2
    """
    raw = parse_bracket_query(request.query_params.multi_items())
    options = parse_query_options(raw)
    result = await service.list_users(options)
    return {
        "success": True,
        "data": {
            "users": result.items,
            "pagination": result.pagination.model_dump(by_alias=True),
        },
    }
