import pytest
from typer.testing import CliRunner
from convex_shell.cli.main import app
from convex_shell.cli.repl import ConvexShellREPL
from convex_shell.core.namespace import FunctionLeaf

runner = CliRunner()


@pytest.fixture
def repl(fake_cli, tmp_path):
    shell = ConvexShellREPL(cli=fake_cli, config_path=tmp_path / "convex_shell.yaml")
    shell.update()
    return shell


@pytest.fixture
def patched_app(monkeypatch, fake_cli, tmp_path):
    def build(is_prod=False):
        fake_cli.prod = is_prod
        return ConvexShellREPL(is_prod=is_prod, cli=fake_cli, config_path=tmp_path / "convex_shell.yaml")

    monkeypatch.setattr("convex_shell.cli.main.ConvexShellREPL", build)
    return app


def test_repl_exit(patched_app):
    result = runner.invoke(patched_app, [], input=".exit\n")
    assert result.exit_code == 0
    assert "Goodbye!" in result.output


def test_repl_eof_exits_cleanly(patched_app):
    result = runner.invoke(patched_app, [], input="")
    assert result.exit_code == 0
    assert "Goodbye!" in result.output


def test_repl_prompt_shows_deployment(patched_app):
    result = runner.invoke(patched_app, ["--prod"], input=".exit\n")
    assert result.exit_code == 0
    assert "happy-otter-123:prod>" in result.output
    assert "Deployment: PRODUCTION" in result.output


def test_repl_calls_function(patched_app, fake_cli):
    fake_cli.run_results["users/queries:list"] = [{"name": "Ada"}]
    result = runner.invoke(patched_app, [], input="api.users.queries.list({'limit': 1})\n.exit\n")

    assert result.exit_code == 0
    assert '"name": "Ada"' in result.output
    assert fake_cli.calls[-1] == ("run", "users/queries:list", {"limit": 1})


def test_repl_shows_signature(patched_app):
    result = runner.invoke(patched_app, [], input="api.users.mutations.remove\n.exit\n")
    assert "[Mutation] ---- users/mutations:remove" in result.output
    assert 'id: Id<"users">' in result.output


def test_repl_shows_node_children(patched_app):
    result = runner.invoke(patched_app, [], input="api.users\n.exit\n")
    assert "{ queries, mutations }" in result.output


def test_repl_help_lists_modules(patched_app):
    result = runner.invoke(patched_app, [], input="help()\n.exit\n")
    assert "=== Convex Shell Help ===" in result.output
    assert "  api.users" in result.output
    assert "  internal.utils" in result.output


def test_repl_continues_after_error(patched_app):
    result = runner.invoke(patched_app, [], input="1/0\napi.users\n.exit\n")
    assert result.exit_code == 0
    assert "ZeroDivisionError" in result.output
    assert "{ queries, mutations }" in result.output


def test_repl_continues_after_invocation_failure(patched_app, fake_cli, failing_run_error):
    fake_cli.run_error = failing_run_error
    result = runner.invoke(patched_app, [], input="api.users.queries.list()\n.exit\n")
    assert result.exit_code == 0
    assert "Goodbye!" in result.output


def test_repl_startup_failure_exits_with_error(patched_app, fake_cli, failing_spec_error):
    fake_cli.spec_error = failing_spec_error
    result = runner.invoke(patched_app, [], input=".exit\n")
    assert result.exit_code == 1
    assert "not logged in" in result.output


def test_statements_persist_in_namespace(repl, fake_cli):
    fake_cli.run_results["users/queries:list"] = {"count": 2}

    assert repl.handle_line("page = api.users.queries.list()") is True
    assert repl.evaluate("page['count']") == 2


def test_update_rebinds_namespace(repl):
    first = repl.namespace["api"]
    repl.handle_line("update()")

    assert repl.namespace["api"] is not first
    assert repl.namespace["api"] is repl.context.api


def test_failed_update_keeps_bindings(repl, fake_cli, failing_spec_error):
    api = repl.namespace["api"]
    fake_cli.spec_error = failing_spec_error

    assert repl.handle_line("update()") is True
    assert repl.namespace["api"] is api
    assert repl.context.api is api


def test_evaluate_returns_leaf(repl):
    assert isinstance(repl.evaluate("internal.utils.actions.helloWorld"), FunctionLeaf)


def test_exit_command(repl):
    assert repl.handle_line(".exit") is False
    assert repl.handle_line("  .exit  ") is False


def test_display_plain_text(repl, capsys):
    repl.display("done")
    repl.display(None)
    assert capsys.readouterr().out == "done\n"


def test_display_list_of_nodes(repl, capsys):
    capsys.readouterr()
    assert repl.handle_line("[api.users, internal.utils]") is True

    captured = capsys.readouterr()
    assert "{ queries, mutations }" in captured.out
    assert "{ actions }" in captured.out
    assert "not found" not in captured.err
    assert "Serialization failed" not in captured.err
