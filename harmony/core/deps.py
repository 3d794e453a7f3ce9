"""
Dependency Injection

FastAPI dependencies for routes.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from harmony.core.token import CurrentUserDep, get_current_user_id  # noqa: F401
from harmony.infra.db import get_db
from harmony.workflow.engine import WorkflowEngine

# Type aliases for common dependencies
SessionDep = Annotated[AsyncSession, Depends(get_db)]


def get_workflow_engine(db: SessionDep) -> WorkflowEngine:
    return WorkflowEngine(db)


EngineDep = Annotated[WorkflowEngine, Depends(get_workflow_engine)]
