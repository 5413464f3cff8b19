"""
Unit Tests for the evaluation relation graph
"""
import pytest
from datetime import datetime, timedelta
from sqlalchemy import select, func

from app.core.exceptions import BadRequestError, ResourceNotFoundError
from app.models.cohort import Cohort
from app.models.evaluation import EvaluationRelation
from app.models.project import Project
from app.services.relation_service import RelationService


async def count_relations(db_session) -> int:
    return (await db_session.execute(select(func.count(EvaluationRelation.id)))).scalar()


async def add_project(db_session, cohort_year, adviser_id=None, name='Extra Project') -> Project:
    project = Project(name=name, cohort_year=cohort_year, adviser_id=adviser_id)
    db_session.add(project)
    await db_session.commit()
    return project


class TestCreateRelations:

    @pytest.mark.asyncio
    async def test_create_relation_resolves_adviser(self, db_session, projects, adviser):
        service = RelationService(db_session)

        relation = await service.create_relation(projects[0].id, projects[1].id)

        assert relation.from_project.id == projects[0].id
        assert relation.to_project.id == projects[1].id
        assert relation.adviser.adviser_id == adviser.id

    @pytest.mark.asyncio
    async def test_unknown_project(self, db_session, projects):
        with pytest.raises(BadRequestError, match='do not exist'):
            await RelationService(db_session).create_relation(projects[0].id, 999)

    @pytest.mark.asyncio
    async def test_cross_cohort_rejected(self, db_session, projects):
        now = datetime.utcnow()
        db_session.add(Cohort(
            academic_year=1999, start_date=now - timedelta(days=9000), end_date=now - timedelta(days=8700)
        ))
        await db_session.commit()
        other = await add_project(db_session, 1999)

        with pytest.raises(BadRequestError, match='same cohort'):
            await RelationService(db_session).create_relation(projects[0].id, other.id)


class TestGroupRelations:
    """Every ordered pair among the projects, created at most once"""

    @pytest.mark.asyncio
    async def test_all_ordered_pairs(self, db_session, projects, cohort, adviser):
        third = await add_project(db_session, cohort.academic_year, adviser.id)
        ids = [projects[0].id, projects[1].id, third.id]

        created = await RelationService(db_session).create_group_relations(ids)

        assert created == 6
        assert await count_relations(db_session) == 6

    @pytest.mark.asyncio
    async def test_idempotent(self, db_session, projects):
        service = RelationService(db_session)
        ids = [p.id for p in projects]

        assert await service.create_group_relations(ids) == 2
        assert await service.create_group_relations(ids) == 0
        assert await count_relations(db_session) == 2

    @pytest.mark.asyncio
    async def test_existing_pair_skipped(self, db_session, projects):
        service = RelationService(db_session)
        await service.create_relation(projects[0].id, projects[1].id)

        assert await service.create_group_relations([p.id for p in projects]) == 1

    @pytest.mark.asyncio
    async def test_unknown_group(self, db_session, projects):
        with pytest.raises(ResourceNotFoundError):
            await RelationService(db_session).create_group_relations([p.id for p in projects], group_id=42)


class TestQueryRelations:

    @pytest.mark.asyncio
    async def test_filter_by_target(self, db_session, projects, adviser):
        service = RelationService(db_session)
        await service.create_relation(projects[0].id, projects[1].id)

        response = await service.query_relations(None, projects[1].id)

        assert response.to_project.id == projects[1].id
        assert len(response.relations) == 1
        relation = response.relations[0]
        assert relation.from_project.id == projects[0].id
        assert relation.to_project is None
        assert relation.adviser.adviser_id == adviser.id

    @pytest.mark.asyncio
    async def test_no_adviser_leaves_adviser_out(self, db_session, projects, cohort):
        orphan = await add_project(db_session, cohort.academic_year)
        service = RelationService(db_session)
        await service.create_relation(orphan.id, projects[0].id)

        response = await service.query_relations(orphan.id, None)

        assert response.relations[0].adviser is None
        assert 'adviser' not in response.relations[0].model_fields_set


class TestDeleteRelations:

    @pytest.mark.asyncio
    async def test_delete_by_project_both_directions(self, db_session, projects):
        service = RelationService(db_session)
        await service.create_group_relations([p.id for p in projects])

        assert await service.delete_by_project(projects[0].id) == 2
        assert await count_relations(db_session) == 0

    @pytest.mark.asyncio
    async def test_delete_by_adviser(self, db_session, projects, adviser, cohort):
        outsider = await add_project(db_session, cohort.academic_year, name='Outsider')
        service = RelationService(db_session)
        await service.create_group_relations([projects[0].id, outsider.id])
        await service.create_relation(projects[0].id, projects[1].id)

        # Edges touching the adviser's projects go, whichever end they are on
        assert await service.delete_by_adviser(adviser.id) == 3
        assert await count_relations(db_session) == 0
