"""
Flask CLI command tests.
"""

from restopos.models import DiningTable, RolePermission, User


class TestSystemInit:
    def test_init_is_idempotent(self, app, db_session):
        runner = app.test_cli_runner()

        result = runner.invoke(args=["system", "init", "--tables", "4"])
        assert result.exit_code == 0, result.output
        assert db_session.query(User).count() == 4
        assert db_session.query(DiningTable).count() == 4
        assert db_session.query(RolePermission).filter_by(role="kitchen").count() == 2

        result = runner.invoke(args=["system", "init"])
        assert result.exit_code == 0, result.output
        assert "already exists" in result.output
        assert db_session.query(User).count() == 4
        assert db_session.query(DiningTable).count() == 4


class TestPermsCommands:
    def test_check_grant_revoke(self, app, cashier_user):
        runner = app.test_cli_runner()

        result = runner.invoke(args=["perms", "check", cashier_user.email, "inventory:read"])
        assert "DOES NOT HAVE" in result.output

        runner.invoke(args=["perms", "grant", "cashier", "inventory:read"])
        result = runner.invoke(args=["perms", "check", cashier_user.email, "inventory:read"])
        assert "HAS permission" in result.output

        result = runner.invoke(args=["perms", "revoke", "cashier", "inventory:read"])
        assert "Revoked" in result.output

    def test_grant_unknown_code(self, app, setup_permissions):
        result = app.test_cli_runner().invoke(args=["perms", "grant", "cashier", "nuclear:launch"])
        assert "FAIL" in result.output

    def test_list_by_role(self, app, setup_permissions):
        result = app.test_cli_runner().invoke(args=["perms", "list", "--role", "kitchen"])
        assert result.exit_code == 0
        assert "Total: 2 permissions" in result.output


class TestTablesCommands:
    def test_create_and_list(self, app, db_session):
        runner = app.test_cli_runner()

        result = runner.invoke(args=["tables", "create", "--number", "12", "--name", "Patio 2"])
        assert "PASS" in result.output

        result = runner.invoke(args=["tables", "create", "--number", "12"])
        assert "FAIL" in result.output

        result = runner.invoke(args=["tables", "list"])
        assert "Patio 2" in result.output
