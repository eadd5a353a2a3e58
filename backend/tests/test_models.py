"""Tests for database models: creation, defaults and constraints."""

import pytest
from sqlalchemy.exc import IntegrityError


@pytest.mark.integration
class TestOrganizationModel:

    async def test_create_organization(self, db_session):
        from db.models import Organization

        org = Organization(name="Acme Corp", slug="acme-corp")
        db_session.add(org)
        await db_session.flush()
        assert org.id is not None
        assert org.created_at is not None
        assert org.is_deleted is False

    async def test_soft_delete(self, db_session, workspace):
        """SoftDeleteMixin should set is_deleted and deleted_at."""
        org = workspace.organization
        org.soft_delete()
        assert org.is_deleted is True
        assert org.deleted_at is not None
        org.restore()
        assert org.is_deleted is False
        assert org.deleted_at is None

    async def test_slug_is_unique(self, db_session):
        from db.models import Organization

        db_session.add_all([
            Organization(name="One", slug="same"),
            Organization(name="Two", slug="same"),
        ])
        with pytest.raises(IntegrityError):
            await db_session.flush()
        await db_session.rollback()


@pytest.mark.integration
class TestMembershipModels:

    async def test_one_organization_per_user(self, db_session, workspace):
        from db.models import OrganizationMember

        db_session.add(OrganizationMember(
            organization_id=workspace.other_organization.id,
            user_id=workspace.member.id,
            role="member",
        ))
        with pytest.raises(IntegrityError):
            await db_session.flush()
        await db_session.rollback()

    async def test_department_membership_is_unique(self, db_session, workspace):
        from db.models import DepartmentMember

        db_session.add(DepartmentMember(
            department_id=workspace.department.id,
            user_id=workspace.member.id,
            role="member",
        ))
        with pytest.raises(IntegrityError):
            await db_session.flush()
        await db_session.rollback()


@pytest.mark.integration
class TestAgentModel:

    async def test_config_properties(self, db_session, workspace):
        from db.models import Agent

        agent = Agent(
            organization_id=workspace.organization.id,
            name="Summariser",
            model_provider="gemini",
            config={"prompt": "Summarise", "is_active": True},
        )
        db_session.add(agent)
        await db_session.flush()
        assert agent.is_active is True
        assert agent.prompt == "Summarise"

    async def test_missing_config(self, db_session, workspace):
        from db.models import Agent

        agent = Agent(organization_id=workspace.organization.id, name="Bare")
        db_session.add(agent)
        await db_session.flush()
        assert agent.is_active is False
        assert agent.prompt is None
        assert agent.model_provider == "gemini"


@pytest.mark.integration
class TestWorkflowExecutionModel:

    async def test_defaults(self, db_session, workspace):
        from db.models import Workflow, WorkflowExecution

        workflow = Workflow(organization_id=workspace.organization.id, name="Empty")
        db_session.add(workflow)
        await db_session.flush()
        assert workflow.steps == []
        assert workflow.is_active is True

        execution = WorkflowExecution(workflow_id=workflow.id, input_data={"a": 1})
        db_session.add(execution)
        await db_session.flush()
        assert execution.status == "running"
        assert execution.started_at is not None
        assert execution.completed_at is None
        assert execution.output_data is None
