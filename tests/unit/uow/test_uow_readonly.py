import pytest
from sqlalchemy import func, select, text

from wrenchlog.models.user import User
from wrenchlog.uow import SQLAlchemyReadOnlyUnitOfWork as ROuow
from wrenchlog.uow import SQLAlchemyUnitOfWork as RWuow

from tests.factories.user import UserFactory


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self, session):
        """
        Ensure that attempting to flush ORM changes inside the RO UoW raises.
        """
        with ROuow(session) as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            uow.session.add(UserFactory.build())
            uow.session.flush()

    def test_blocks_core_dml(self, session):
        """
        Ensure that raw SQL DML is blocked inside the RO UoW.
        """
        email = UserFactory.build().email
        with ROuow(session) as uow, pytest.raises(RuntimeError, match="SQL statement blocked"):
            uow.session.execute(
                text("INSERT INTO users (id, email, password_hash) VALUES ('x', :email, 'h')"),
                {"email": email},
            )

    def test_allows_reads(self, session):
        """
        Read operations should work normally within RO UoW.
        """
        with RWuow(session) as uow:
            uow.users.add(UserFactory.build())

        with ROuow(session) as uow:
            count = uow.session.execute(select(func.count()).select_from(User)).scalar_one()
            assert count >= 1

    def test_disallows_commit(self, session):
        """
        RO UoW must reject commit().
        """
        with ROuow(session) as uow, pytest.raises(RuntimeError, match="does not allow commit"):
            uow.commit()

    def test_keeps_a_transaction_it_did_not_open(self, session):
        """
        Joining an already open transaction must not roll back the caller's work.
        """
        user = UserFactory()
        assert session().in_transaction()

        with ROuow(session) as uow:
            assert uow.users.get(user.id) is not None

        assert session.get(User, user.id) is not None

    def test_guards_are_removed_on_exit(self, session):
        with ROuow(session):
            pass

        with RWuow(session) as uow:
            uow.users.add(UserFactory.build())
