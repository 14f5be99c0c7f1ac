import textwrap
from typing import Any, Callable, Iterable, Optional, Sequence, Type, TypeVar

import sqlalchemy as sa
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from ejournal.auth.deps import require_admin, require_auth
from ejournal.db.models import User
from ejournal.db.session import get_session
from ejournal.services.audit import log_action

ModelT = TypeVar("ModelT")
SchemaT = TypeVar("SchemaT", bound=BaseModel)


def _get_attr(model: type, name: str) -> InstrumentedAttribute:
    try:
        return getattr(model, name)
    except AttributeError as e:
        raise RuntimeError(f"{model.__name__} has no attribute '{name}'") from e


def _note_summary(model: type) -> str:
    """First sentence of the model's ``description=`` note."""
    note = " ".join((getattr(model, "NOTE", "") or "").split())
    if "description=" in note:
        note = note.split("description=", 1)[1]
    return note.split(". ", 1)[0].rstrip(".")


def _with_note(model: type, extra: str) -> str:
    note = _note_summary(model)
    if note:
        return textwrap.dedent(f"""{note}.\n\n{extra}""").strip()
    return extra


def build_crud_router(
    *,
    model: Type[ModelT],
    schema_in: Type[SchemaT],
    schema_out: Type[SchemaT],
    path_prefix: str,
    tags: Optional[Iterable[str]] = None,
    read_dependency: Callable[..., Any] = require_auth,
    write_dependency: Callable[..., Any] = require_admin,
    filters: Sequence[str] = (),
    audit_name: Optional[str] = None,
) -> APIRouter:
    """List/get/create/update/delete routes for a plain reference table.

    ``filters`` names model columns exposed as camelCase query parameters on
    the list route (``school_id`` -> ``?schoolId=``). Writes need
    ``write_dependency`` and leave a system log ``<audit_name>_created`` etc.
    """
    router = APIRouter(prefix=path_prefix, tags=list(tags or []))

    pk_col = _get_attr(model, "id")
    filter_cols = {name: _get_attr(model, name) for name in filters}
    table_name = getattr(model, "__tablename__", model.__name__.lower())
    table_label = table_name.replace("_", " ").title()
    audit = audit_name or table_name.rstrip("s")

    # LIST
    async def list_items(
        request: Request,
        _user: User = Depends(read_dependency),
        session: AsyncSession = Depends(get_session),
        limit: int = 500,
        offset: int = 0,
    ) -> list[schema_out]:
        stmt = sa.select(model)
        for name, col in filter_cols.items():
            raw = request.query_params.get(_camel(name)) or request.query_params.get(name)
            if raw is None:
                continue
            try:
                value = int(raw)
            except ValueError:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid {_camel(name)}")
            stmt = stmt.where(col == value)
        stmt = stmt.order_by(pk_col).limit(limit).offset(offset)
        items = (await session.execute(stmt)).scalars().all()
        return [schema_out.model_validate(it) for it in items]

    router.add_api_route(
        "",
        list_items,
        methods=["GET"],
        response_model=list[schema_out],
        summary=f"{table_label} List",
        description=_with_note(
            model,
            f"Retrieve `{table_name}` records ordered by id."
            + (f" Filter with {', '.join(_camel(f) for f in filters)}." if filters else ""),
        ),
    )

    # GET ONE
    async def get_item(
        item_id: int,
        _user: User = Depends(read_dependency),
        session: AsyncSession = Depends(get_session),
    ) -> schema_out:
        obj = await session.get(model, item_id)
        if not obj:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{table_label} not found")
        return schema_out.model_validate(obj)

    router.add_api_route(
        "/{item_id}",
        get_item,
        methods=["GET"],
        response_model=schema_out,
        summary=f"Get {table_label}",
        description=_with_note(model, f"Retrieve a single `{table_name}` record. Returns 404 if missing."),
    )

    # CREATE
    async def create_item(
        payload: schema_in,
        request: Request,
        user: User = Depends(write_dependency),
        session: AsyncSession = Depends(get_session),
    ) -> schema_out:
        obj = model(**payload.model_dump(exclude_unset=True))
        session.add(obj)
        await session.flush()
        log_action(session, user.id, f"{audit}_created", f"{table_name} id={obj.id}", request)
        await session.commit()
        return schema_out.model_validate(obj)

    router.add_api_route(
        "",
        create_item,
        methods=["POST"],
        response_model=schema_out,
        status_code=status.HTTP_201_CREATED,
        summary=f"Create {table_label}",
        description=_with_note(model, f"Create a `{table_name}` record and return it with its id."),
    )

    # UPDATE
    async def update_item(
        item_id: int,
        payload: schema_in,
        request: Request,
        user: User = Depends(write_dependency),
        session: AsyncSession = Depends(get_session),
    ) -> schema_out:
        obj = await session.get(model, item_id)
        if not obj:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{table_label} not found")
        for k, v in payload.model_dump(exclude_unset=True).items():
            setattr(obj, k, v)
        log_action(session, user.id, f"{audit}_updated", f"{table_name} id={item_id}", request)
        await session.commit()
        return schema_out.model_validate(obj)

    router.add_api_route(
        "/{item_id}",
        update_item,
        methods=["PUT"],
        response_model=schema_out,
        summary=f"Update {table_label}",
        description=_with_note(model, f"Update a `{table_name}` record. Returns 404 if missing."),
    )

    # DELETE
    async def delete_item(
        item_id: int,
        request: Request,
        user: User = Depends(write_dependency),
        session: AsyncSession = Depends(get_session),
    ) -> Response:
        obj = await session.get(model, item_id)
        if not obj:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{table_label} not found")
        await session.delete(obj)
        log_action(session, user.id, f"{audit}_deleted", f"{table_name} id={item_id}", request)
        await session.commit()
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    router.add_api_route(
        "/{item_id}",
        delete_item,
        methods=["DELETE"],
        status_code=status.HTTP_204_NO_CONTENT,
        response_class=Response,
        summary=f"Delete {table_label}",
        description=_with_note(model, f"Delete a `{table_name}` record. Returns 204, or 404 if missing."),
    )

    return router


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p.title() for p in rest)
