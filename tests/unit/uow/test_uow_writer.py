import pytest
from sqlalchemy import select

from wrenchlog.models.user import User
from wrenchlog.uow import SQLAlchemyUnitOfWork as RWuow

from tests.factories.user import UserFactory


def _by_email(session, email):
    return session.execute(select(User).where(User.email == email)).scalar_one_or_none()


class TestSQLAlchemyUnitOfWork:
    def test_commits_on_success(self, session):
        """Changes made inside the scope are visible once it exits."""
        email = UserFactory.build().email
        with RWuow(session) as uow:
            uow.users.add(UserFactory.build(email=email))

        assert _by_email(session, email) is not None

    def test_rolls_back_on_error(self, session):
        """An exception inside the scope discards every pending change."""
        email = UserFactory.build().email
        with pytest.raises(ValueError), RWuow(session) as uow:
            uow.users.add(UserFactory.build(email=email))
            raise ValueError("boom")

        assert _by_email(session, email) is None

    def test_repositories_share_the_session(self, session):
        uow = RWuow(session)

        assert uow.parts.session is uow.maintenance_records.session is session
        assert uow.parts.associations is uow.tag_associations
        assert uow.maintenance_items.parts is uow.parts
