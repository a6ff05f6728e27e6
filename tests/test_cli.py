"""
Tests for the interactive CLI shell and its sub-commands.
"""

from unittest.mock import MagicMock, patch

import pytest

from domains.record_hub.cli import main as cli_main
from domains.record_hub.cli.main import CollabShell, main


class ScriptedShell:
    """按脚本回答提示，收集输出"""

    def __init__(self, registry, answers):
        self.answers = iter(answers)
        self.output = []
        self.shell = CollabShell(registry, input_func=self._input, output=self.output.append)

    def _input(self, prompt):
        try:
            return next(self.answers)
        except StopIteration:
            raise EOFError from None

    def run(self):
        self.shell.run()
        return "\n".join(self.output)


class TestMenu:

    def test_add_researcher(self, registry, researcher_store):
        out = ScriptedShell(registry, ["1", "A", "CS", "AI, Web", "0"]).run()

        [researcher] = researcher_store.records.values()
        assert researcher.interests == ["AI", "Web"]
        assert "研究员已添加: A" in out

    def test_project_requires_researchers(self, registry, project_store):
        out = ScriptedShell(registry, ["2", "0"]).run()

        assert "暂无研究员" in out
        assert project_store.records == {}

    def test_add_project_with_relation_and_publication(
        self, registry, record_service, project_store, publication_store, graph_store
    ):
        record_service.create_researcher("A", "CS")
        record_service.create_researcher("B", "Bio")

        ScriptedShell(registry, [
            "2", "X", "desc",
            "1,2",
            "supervision", "co-authorship",
            "y", "P1", "2021",
            "n",
            "0",
        ]).run()

        [project] = project_store.records.values()
        assert list(project.participant_relations.values()) == ["SUPERVISION", "CO_AUTHORSHIP"]
        assert len(project.publications) == 1
        assert graph_store.edge_types("B") == {"CO_AUTHORSHIP", "AUTHOR_OF"}

    def test_out_of_range_selection_aborts(self, registry, record_service, project_store):
        record_service.create_researcher("A", "CS")

        out = ScriptedShell(registry, ["2", "X", "", "3", "0"]).run()

        assert "无效的编号: 3" in out
        assert project_store.records == {}

    def test_non_numeric_year_aborts(self, registry, record_service, publication_store):
        record_service.create_researcher("A", "CS")

        out = ScriptedShell(registry, ["3", "P1", "twenty", "0"]).run()

        assert "年份必须是数字" in out
        assert publication_store.records == {}

    def test_invalid_relation_reported(self, registry, record_service, project_store):
        record_service.create_researcher("A", "CS")

        out = ScriptedShell(registry, ["2", "X", "", "1", "enemies", "n", "0"]).run()

        assert "无效的关系类型" in out
        assert project_store.records == {}

    def test_error_logged_and_loop_continues(self, registry, record_service, monkeypatch):
        monkeypatch.setattr(record_service, "list_researchers", MagicMock(side_effect=RuntimeError("boom")))

        out = ScriptedShell(registry, ["4", "5", "0"]).run()

        assert "操作异常: boom" in out
        assert "暂无项目" in out

    def test_show_collaborations_and_profile(self, registry, record_service):
        a = record_service.create_researcher("A", "CS")
        record_service.create_publication("P1", 2020, [a.id])

        out = ScriptedShell(registry, ["6", "7", "1", "0"]).run()

        assert "A -[AUTHOR_OF]-> P1" in out
        assert '"title": "P1"' in out

    def test_unknown_option(self, registry):
        out = ScriptedShell(registry, ["9", "0"]).run()

        assert "无效的选项" in out

    def test_end_of_input_exits(self, registry):
        assert "再见" in ScriptedShell(registry, []).run()


class TestSubcommands:

    @pytest.fixture
    def patched(self, registry):
        with patch.object(cli_main, "register_core_services", return_value=registry), \
                patch.object(cli_main, "configure_logging"), \
                patch.object(cli_main, "load_dotenv"):
            yield registry

    def test_check_healthy(self, patched):
        assert main(["check"]) == 0

    def test_check_failure_exit_code(self, patched, fake_redis):
        fake_redis.ping = lambda: False

        assert main(["check"]) == 1

    def test_seed(self, patched, researcher_store, capsys):
        assert main(["seed"]) == 0

        assert len(researcher_store.records) == 3
        assert '"researchers": 3' in capsys.readouterr().out

    def test_resync(self, patched, record_service, graph_store):
        record_service.create_researcher("A", "CS")
        graph_store.clear()

        assert main(["resync"]) == 0
        assert len(graph_store.nodes) == 1

    def test_closes_stores_on_exit(self, patched, graph_store):
        main(["check"])

        assert graph_store.closed is True
