"""
Evaluation Relation Service
Maintains the directed graph of which project evaluates which.

Evaluation responsibility follows the `from` project's adviser, so every
relation returned by a query carries that adviser when one is assigned.
"""

from typing import List, Optional, Iterable, Set, Tuple
from sqlalchemy import select, delete, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import BadRequestError, ResourceNotFoundError
from app.core.logging_config import logger
from app.models.evaluation import EvaluationRelation, EvaluationGroup
from app.models.project import Project
from app.models.roles import Adviser
from app.schemas.project import ProjectResponse
from app.schemas.relation import RelationResponse, RelationQueryResponse
from app.services.user_service import adviser_account


def _with_endpoints():
    """Eager-load both endpoint projects and the evaluating adviser"""
    from_adviser = selectinload(EvaluationRelation.from_project).selectinload(Project.adviser)
    return (
        from_adviser.selectinload(Adviser.user),
        from_adviser.selectinload(Adviser.projects),
        selectinload(EvaluationRelation.to_project),
    )


def relation_response(
    relation: EvaluationRelation,
    include_from: bool = True,
    include_to: bool = True,
) -> RelationResponse:
    """Only resolved keys are set so unset ones can be left out of the payload"""
    fields = {
        "id": relation.id,
        "from_project_id": relation.from_project_id,
        "to_project_id": relation.to_project_id,
        "group_id": relation.group_id,
    }
    if include_from:
        fields["from_project"] = ProjectResponse.model_validate(relation.from_project)
    if include_to:
        fields["to_project"] = ProjectResponse.model_validate(relation.to_project)
    if relation.from_project.adviser is not None:
        fields["adviser"] = adviser_account(relation.from_project.adviser)
    return RelationResponse(**fields)


class RelationService:
    """Service for evaluation relation operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _load(self, relation_id: int) -> EvaluationRelation:
        result = await self.db.execute(
            select(EvaluationRelation)
            .options(*_with_endpoints())
            .where(EvaluationRelation.id == relation_id)
        )
        relation = result.scalar_one_or_none()
        if not relation:
            raise ResourceNotFoundError("Relation", relation_id)
        return relation

    async def _projects_in_one_cohort(self, project_ids: Iterable[int]) -> List[Project]:
        project_ids = list(dict.fromkeys(project_ids))
        result = await self.db.execute(select(Project).where(Project.id.in_(project_ids)))
        projects = list(result.scalars().all())

        if len(projects) != len(project_ids):
            found = {project.id for project in projects}
            missing = [pid for pid in project_ids if pid not in found]
            raise BadRequestError(f"Projects {missing} do not exist")
        if len({project.cohort_year for project in projects}) > 1:
            raise BadRequestError("Projects in a relation must belong to the same cohort")
        return projects

    # =====================================================
    # CREATE
    # =====================================================

    async def create_relation(self, from_project_id: int, to_project_id: int) -> RelationResponse:
        await self._projects_in_one_cohort([from_project_id, to_project_id])

        relation = EvaluationRelation(from_project_id=from_project_id, to_project_id=to_project_id)
        self.db.add(relation)
        await self.db.commit()

        logger.info(f"[Relations] Created relation {from_project_id} -> {to_project_id}")
        return relation_response(await self._load(relation.id))

    async def create_group_relations(self, project_ids: List[int], group_id: Optional[int] = None) -> int:
        """
        Create every ordered pair (a, b), a != b, among the projects.

        Pairs that already exist are left alone. Returns how many were created.
        """
        await self._projects_in_one_cohort(project_ids)
        if group_id is not None and not await self.db.get(EvaluationGroup, group_id):
            raise ResourceNotFoundError("Group", group_id)

        project_ids = list(dict.fromkeys(project_ids))
        result = await self.db.execute(
            select(EvaluationRelation.from_project_id, EvaluationRelation.to_project_id).where(
                EvaluationRelation.from_project_id.in_(project_ids),
                EvaluationRelation.to_project_id.in_(project_ids),
            )
        )
        existing: Set[Tuple[int, int]] = {tuple(row) for row in result.all()}

        created = 0
        for from_id in project_ids:
            for to_id in project_ids:
                if from_id == to_id or (from_id, to_id) in existing:
                    continue
                self.db.add(EvaluationRelation(from_project_id=from_id, to_project_id=to_id, group_id=group_id))
                created += 1

        await self.db.commit()
        logger.info(f"[Relations] Created {created} relations among {len(project_ids)} projects")
        return created

    # =====================================================
    # QUERIES
    # =====================================================

    async def get_relation(self, relation_id: int) -> EvaluationRelation:
        return await self._load(relation_id)

    async def query_relations(self, from_project_id: Optional[int], to_project_id: Optional[int]) -> RelationQueryResponse:
        """
        Edges filtered by either endpoint. The endpoint used as the filter is
        returned once at the top level and omitted from each relation.
        """
        query = select(EvaluationRelation).options(*_with_endpoints()).order_by(EvaluationRelation.id)
        if from_project_id is not None:
            query = query.where(EvaluationRelation.from_project_id == from_project_id)
        if to_project_id is not None:
            query = query.where(EvaluationRelation.to_project_id == to_project_id)

        result = await self.db.execute(query)
        relations = [
            relation_response(
                relation,
                include_from=from_project_id is None,
                include_to=to_project_id is None,
            )
            for relation in result.scalars().all()
        ]

        response = {"relations": relations}
        if from_project_id is not None:
            project = await self.db.get(Project, from_project_id)
            if project:
                response["from_project"] = ProjectResponse.model_validate(project)
        if to_project_id is not None:
            project = await self.db.get(Project, to_project_id)
            if project:
                response["to_project"] = ProjectResponse.model_validate(project)
        return RelationQueryResponse(**response)

    async def list_by_adviser(self, adviser_id: int) -> List[RelationResponse]:
        """All edges whose `from` project is advised by the adviser"""
        if not await self.db.get(Adviser, adviser_id):
            raise ResourceNotFoundError("Adviser", adviser_id)

        result = await self.db.execute(
            select(EvaluationRelation)
            .options(*_with_endpoints())
            .join(Project, EvaluationRelation.from_project_id == Project.id)
            .where(Project.adviser_id == adviser_id)
            .order_by(EvaluationRelation.from_project_id, EvaluationRelation.id)
        )
        return [relation_response(relation) for relation in result.scalars().all()]

    # =====================================================
    # DELETE
    # =====================================================

    async def delete_relation(self, relation_id: int) -> RelationResponse:
        relation = await self._load(relation_id)
        response = relation_response(relation)
        await self.db.delete(relation)
        await self.db.commit()
        return response

    async def delete_by_project(self, project_id: int, commit: bool = True) -> int:
        """Both directions; used before a project is removed"""
        result = await self.db.execute(
            delete(EvaluationRelation).where(
                or_(
                    EvaluationRelation.from_project_id == project_id,
                    EvaluationRelation.to_project_id == project_id,
                )
            )
        )
        if commit:
            await self.db.commit()
        logger.info(f"[Relations] Deleted {result.rowcount} relations of project {project_id}")
        return result.rowcount

    async def delete_by_adviser(self, adviser_id: int, commit: bool = True) -> int:
        """Every edge touching any project under the adviser; used before an adviser is removed"""
        project_ids = select(Project.id).where(Project.adviser_id == adviser_id)
        result = await self.db.execute(
            delete(EvaluationRelation).where(
                or_(
                    EvaluationRelation.from_project_id.in_(project_ids),
                    EvaluationRelation.to_project_id.in_(project_ids),
                )
            )
        )
        if commit:
            await self.db.commit()
        logger.info(f"[Relations] Deleted {result.rowcount} relations of adviser {adviser_id}")
        return result.rowcount


def get_relation_service(db: AsyncSession) -> RelationService:
    return RelationService(db)
