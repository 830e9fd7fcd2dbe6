"""Todo endpoints: /api/todos."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from habitladder.auth.dependencies import get_current_identity
from habitladder.auth.session import Identity
from habitladder.database import get_session
from habitladder.db.models import Todo
from habitladder.todos.schemas import (
    StandaloneTodoRequest,
    TodoCreateRequest,
    TodoEnvelope,
    TodoListResponse,
    TodoResponse,
    TodoRestoreRequest,
    TodoStatusRequest,
    TodoUpdateRequest,
)
from habitladder.todos.service import (
    create_todo,
    delete_todo,
    get_todo,
    list_archived_todos,
    list_todos,
    restore_todo,
    set_todo_status,
    update_todo,
)

router = APIRouter(prefix="/api/todos", tags=["Todos"])


def _envelope(todo: Todo) -> TodoEnvelope:
    return TodoEnvelope(todo=TodoResponse.model_validate(todo))


@router.get("", response_model=TodoListResponse)
async def get_todos(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> TodoListResponse:
    todos = await list_todos(db, identity.id)
    return TodoListResponse(todos=[TodoResponse.model_validate(t) for t in todos])


@router.post("", response_model=TodoEnvelope, status_code=201)
async def add_todo(
    body: TodoCreateRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> TodoEnvelope:
    return _envelope(await create_todo(db, identity.id, **body.model_dump()))


# Fixed paths are registered before /{todo_id} so they are not read as ids.


@router.post("/standalone", response_model=TodoEnvelope, status_code=201)
async def add_standalone_todo(
    body: StandaloneTodoRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> TodoEnvelope:
    """A todo attached to no activity or goal."""
    return _envelope(await create_todo(db, identity.id, **body.model_dump()))


@router.get("/archived", response_model=TodoListResponse)
async def get_archived_todos(
    activity_id: int | None = Query(None),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> TodoListResponse:
    todos = await list_archived_todos(db, identity.id, activity_id)
    return TodoListResponse(todos=[TodoResponse.model_validate(t) for t in todos])


@router.put("/archived", response_model=TodoEnvelope)
async def restore_archived_todo(
    body: TodoRestoreRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> TodoEnvelope:
    return _envelope(await restore_todo(db, identity.id, body.todo_id))


@router.get("/{todo_id}", response_model=TodoEnvelope)
async def get_one_todo(
    todo_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> TodoEnvelope:
    return _envelope(await get_todo(db, identity.id, todo_id))


@router.put("/{todo_id}", response_model=TodoEnvelope)
async def edit_todo(
    todo_id: int,
    body: TodoUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> TodoEnvelope:
    todo = await update_todo(db, identity.id, todo_id, title=body.title, description=body.description)
    return _envelope(todo)


@router.patch("/{todo_id}", response_model=TodoEnvelope)
async def change_todo_status(
    todo_id: int,
    body: TodoStatusRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> TodoEnvelope:
    todo = await set_todo_status(
        db, identity.id, todo_id, is_completed=body.is_completed, is_archived=body.is_archived
    )
    return _envelope(todo)


@router.delete("/{todo_id}")
async def remove_todo(
    todo_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> dict[str, str]:
    await delete_todo(db, identity.id, todo_id)
    return {"message": "Todo deleted successfully"}
