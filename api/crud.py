"""CRUD routes for the CRM entities: /api/{contacts,accounts,deals,activities,leads}."""

from uuid import UUID

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse
from pydantic.alias_generators import to_camel

from api.base import dump, paginated_response, success_response
from core.services.entity_service import EntityService


def _entity_json(entity) -> dict:
    return entity.model_dump(mode="json", by_alias=True)


def _filters_from_query(request: Request, filterable: tuple[str, ...]) -> dict[str, str]:
    """Exact-match filters from the query string, in camelCase or snake_case."""
    filters = {}
    for column in filterable:
        value = request.query_params.get(column) or request.query_params.get(to_camel(column))
        if value:
            filters[column] = value
    return filters


def _snake(name: str) -> str:
    return "".join(f"_{c.lower()}" if c.isupper() else c for c in name)


def _register_entity_routes(router: APIRouter, segment: str, service: EntityService) -> None:
    definition = service.definition
    create_model = definition.create_model
    update_model = definition.update_model
    tag = segment

    @router.get(f"/{segment}", tags=[tag], name=f"list_{segment}")
    def list_entities(
        request: Request,
        page: int = Query(1, ge=1),
        limit: int = Query(50, ge=1, le=200),
        search: str | None = Query(None, max_length=200),
        sort: str = Query("created_at"),
        order: str = Query("desc"),
    ):
        result = service.list_all(
            page=page,
            limit=limit,
            search=search,
            filters=_filters_from_query(request, definition.filterable),
            sort=_snake(sort),
            order=order,
        )
        return dump(paginated_response(
            [_entity_json(e) for e in result.items],
            page=result.page,
            limit=result.limit,
            total=result.total,
        ))

    @router.get(f"/{segment}/{{entity_id}}", tags=[tag], name=f"get_{segment}")
    def get_entity(entity_id: UUID):
        return dump(success_response(_entity_json(service.get(entity_id))))

    @router.get(f"/{segment}/{{entity_id}}/history", tags=[tag], name=f"history_{segment}")
    def entity_history(entity_id: UUID):
        entries = service.history(entity_id)
        return dump(success_response([e.model_dump(mode="json", by_alias=True) for e in entries]))

    @router.post(f"/{segment}", tags=[tag], status_code=201, name=f"create_{segment}")
    def create_entity(body: create_model):
        entity = service.create(body)
        return JSONResponse(status_code=201, content=dump(success_response(_entity_json(entity))))

    @router.put(f"/{segment}/{{entity_id}}", tags=[tag], name=f"update_{segment}")
    def update_entity(entity_id: UUID, body: update_model):
        return dump(success_response(_entity_json(service.update(entity_id, body))))

    @router.delete(f"/{segment}/{{entity_id}}", tags=[tag], name=f"delete_{segment}")
    def delete_entity(entity_id: UUID):
        service.delete(entity_id)
        return dump(success_response({"id": str(entity_id), "deleted": True}))


def create_crud_router(services: dict[str, EntityService]) -> APIRouter:
    """Create the CRUD router; keys of services are URL segments."""
    router = APIRouter()
    for segment, service in services.items():
        _register_entity_routes(router, segment, service)
    return router
