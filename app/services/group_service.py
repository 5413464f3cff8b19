"""
Evaluation Group Service
Adviser-scoped sets of projects that evaluate one another
"""

from typing import List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import BadRequestError, ResourceNotFoundError
from app.core.logging_config import logger
from app.models.evaluation import EvaluationGroup
from app.models.project import Project
from app.models.roles import Adviser
from app.schemas.relation import GroupCreate, GroupUpdate


class GroupService:
    """Service for evaluation group operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _projects(self, project_ids: List[int]) -> List[Project]:
        if not project_ids:
            return []
        result = await self.db.execute(select(Project).where(Project.id.in_(project_ids)))
        projects = list(result.scalars().all())
        if len(projects) != len(set(project_ids)):
            raise BadRequestError("Some of the projects do not exist")
        return projects

    async def get_group(self, group_id: int) -> EvaluationGroup:
        result = await self.db.execute(
            select(EvaluationGroup)
            .options(selectinload(EvaluationGroup.projects))
            .where(EvaluationGroup.id == group_id)
        )
        group = result.scalar_one_or_none()
        if not group:
            raise ResourceNotFoundError("Group", group_id)
        return group

    async def list_by_adviser(self, adviser_id: int) -> List[EvaluationGroup]:
        result = await self.db.execute(
            select(EvaluationGroup)
            .options(selectinload(EvaluationGroup.projects))
            .where(EvaluationGroup.adviser_id == adviser_id)
            .order_by(EvaluationGroup.id)
        )
        return list(result.scalars().all())

    async def create_group(self, data: GroupCreate) -> EvaluationGroup:
        if not await self.db.get(Adviser, data.adviser_id):
            raise ResourceNotFoundError("Adviser", data.adviser_id)

        group = EvaluationGroup(adviser_id=data.adviser_id, name=data.name)
        group.projects = await self._projects(data.project_ids)
        self.db.add(group)
        await self.db.commit()

        logger.info(f"[Groups] Created group {group.id} for adviser {data.adviser_id}")
        return await self.get_group(group.id)

    async def update_group(self, group_id: int, data: GroupUpdate) -> EvaluationGroup:
        """Rename and/or add projects; projects already in the group are kept"""
        group = await self.get_group(group_id)
        if data.name is not None:
            group.name = data.name

        current = {project.id for project in group.projects}
        for project in await self._projects(data.project_ids):
            if project.id not in current:
                group.projects.append(project)

        await self.db.commit()
        return await self.get_group(group_id)

    async def delete_group(self, group_id: int) -> EvaluationGroup:
        group = await self.get_group(group_id)
        await self.db.delete(group)
        await self.db.commit()
        logger.info(f"[Groups] Deleted group {group_id}")
        return group


def get_group_service(db: AsyncSession) -> GroupService:
    return GroupService(db)
