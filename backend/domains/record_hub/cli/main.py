#!/usr/bin/env python3
"""
研究协作记录 CLI

使用方式:
    collab-cli              # 交互式菜单（默认）
    collab-cli menu
    collab-cli seed         # 清空图谱并写入示例数据
    collab-cli resync       # 从记录存储重建图谱
    collab-cli check        # 检查三个存储的连接
"""

import argparse
import json
import logging
import sys
from typing import Callable, List, Optional

import psycopg2
from dotenv import load_dotenv

from domains.core import ApplicationError, ServiceRegistry, register_core_services
from domains.core.logging import LogFormat, configure_logging
from domains.graph_hub.core import RelationType

from ..core import ParticipantSpec, PublicationDraft, Researcher, ensure_record_schema
from ..tasks import run_check, run_seed

logger = logging.getLogger(__name__)

MENU = """
========== 研究协作记录 ==========
1. 添加研究员
2. 添加项目
3. 添加论文
4. 查看研究员
5. 查看项目
6. 查看协作关系
7. 查看研究员画像
0. 退出
"""

RELATION_HINT = "co-authorship / supervision / teamwork"


class AbortOperation(Exception):
    """输入无效，放弃当前菜单操作"""


class CollabShell:
    """
    交互式菜单

    每个菜单项是一次独立操作：输入无效时放弃该操作，
    操作抛出的异常记录日志后回到菜单。
    """

    def __init__(
        self,
        registry: ServiceRegistry,
        input_func: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
    ):
        self.registry = registry
        self._input = input_func
        self._print = output

        self.actions = {
            "1": self.add_researcher,
            "2": self.add_project,
            "3": self.add_publication,
            "4": self.show_researchers,
            "5": self.show_projects,
            "6": self.show_collaborations,
            "7": self.show_profile,
        }

    @property
    def record_service(self):
        return self.registry.get("record_service")

    @property
    def profile_service(self):
        return self.registry.get("profile_service")

    @property
    def graph_service(self):
        return self.registry.get("graph_service")

    # ==================== 主循环 ====================

    def run(self) -> None:
        """运行菜单直到选择 0 或输入结束"""
        while True:
            self._print(MENU)
            try:
                choice = self._ask("请选择: ")
            except EOFError:
                break

            if choice == "0":
                break

            action = self.actions.get(choice)
            if action is None:
                self._print("无效的选项")
                continue

            try:
                action()
            except EOFError:
                break
            except AbortOperation as e:
                self._print(str(e))
            except ApplicationError as e:
                logger.warning(f"操作失败: {e}")
                self._print(f"操作失败: {e.message}")
            except Exception as e:
                logger.exception(f"操作异常: {e}")
                self._print(f"操作异常: {e}")

        self._print("再见")

    # ==================== 录入 ====================

    def add_researcher(self) -> None:
        name = self._ask("姓名: ")
        department = self._ask("院系: ")
        interests = self._ask("研究兴趣（逗号分隔）: ")

        researcher = self.record_service.create_researcher(
            name=name,
            department=department,
            interests=interests.split(","),
        )
        self._print(f"研究员已添加: {researcher.name} ({researcher.id})")

    def add_project(self) -> None:
        researchers = self._require_researchers()
        title = self._ask("项目标题: ")
        description = self._ask("项目描述: ")

        self._list_researchers(researchers)
        members = self._select_researchers(researchers, "选择参与者编号（逗号分隔）: ")

        participants = []
        for researcher in members:
            relation = self._ask(f"{researcher.name} 的参与关系（{RELATION_HINT}）: ")
            participants.append(ParticipantSpec(
                researcher.id, relation or RelationType.WORKS_ON.value
            ))

        drafts = []
        while self._ask("是否添加论文？(y/n): ").lower() == "y":
            drafts.append(PublicationDraft(
                title=self._ask("论文标题: "),
                year=self._ask_year(),
            ))

        project = self.record_service.create_project(
            title=title,
            description=description,
            participants=participants,
            publications=drafts,
        )
        self._print(
            f"项目已添加: {project.title} ({project.id})，"
            f"参与者 {len(project.participants)} 人，论文 {len(project.publications)} 篇"
        )

    def add_publication(self) -> None:
        researchers = self._require_researchers()
        title = self._ask("论文标题: ")
        year = self._ask_year()

        self._list_researchers(researchers)
        authors = self._select_researchers(researchers, "选择作者编号（逗号分隔）: ")

        publication = self.record_service.create_publication(
            title=title,
            year=year,
            author_ids=[r.id for r in authors],
        )
        self._print(f"论文已添加: {publication.title} ({publication.id})")

    # ==================== 查询 ====================

    def show_researchers(self) -> None:
        researchers = self.record_service.list_researchers()
        if not researchers:
            self._print("暂无研究员")
            return
        for r in researchers:
            pubs = ", ".join(f"{p['title']} ({p['year']})" for p in r["publications"]) or "-"
            self._print(
                f"- {r['name']} | {r['department']} | "
                f"兴趣: {', '.join(r['interests']) or '-'} | 论文: {pubs}"
            )

    def show_projects(self) -> None:
        projects = self.record_service.list_projects()
        if not projects:
            self._print("暂无项目")
            return
        for p in projects:
            members = ", ".join(f"{m['name']}[{m['relation']}]" for m in p["participants"]) or "-"
            pubs = ", ".join(f"{x['title']} ({x['year']})" for x in p["publications"]) or "-"
            self._print(f"- {p['title']}: {p['description']}")
            self._print(f"    参与者: {members}")
            self._print(f"    论文: {pubs}")

    def show_collaborations(self) -> None:
        collaborations = self.graph_service.list_collaborations()
        if not collaborations:
            self._print("暂无协作关系")
            return
        for c in collaborations:
            self._print(f"- {c['researcher']} -[{c['relation']}]-> {c['target']}")

    def show_profile(self) -> None:
        researchers = self._require_researchers()
        self._list_researchers(researchers)
        index = self._parse_index(self._ask("选择研究员编号: "), len(researchers))

        profile = self.profile_service.get_profile(researchers[index].id)
        self._print(json.dumps(profile, ensure_ascii=False, indent=2))

    # ==================== 输入辅助 ====================

    def _ask(self, prompt: str) -> str:
        return self._input(prompt).strip()

    def _ask_year(self) -> Optional[int]:
        """年份可留空，非数字放弃当前操作"""
        text = self._ask("年份: ")
        if not text:
            return None
        if not text.isdigit():
            raise AbortOperation(f"年份必须是数字: {text}")
        return int(text)

    def _require_researchers(self) -> List[Researcher]:
        researchers = self.record_service.get_researchers()
        if not researchers:
            raise AbortOperation("暂无研究员，请先添加研究员")
        return researchers

    def _list_researchers(self, researchers: List[Researcher]) -> None:
        for i, r in enumerate(researchers, 1):
            self._print(f"{i}. {r.name} ({r.department})")

    def _select_researchers(self, researchers: List[Researcher], prompt: str) -> List[Researcher]:
        """按编号选择研究员，可留空；重复编号只取一次"""
        text = self._ask(prompt)
        indexes = [
            self._parse_index(part, len(researchers))
            for part in text.split(",") if part.strip()
        ]
        return [researchers[i] for i in dict.fromkeys(indexes)]

    @staticmethod
    def _parse_index(text: str, size: int) -> int:
        """将 1 起始的编号转换为下标"""
        text = text.strip()
        if not text.isdigit() or not 1 <= int(text) <= size:
            raise AbortOperation(f"无效的编号: {text}")
        return int(text) - 1


# ==================== 子命令 ====================

def _run_menu(registry: ServiceRegistry) -> int:
    service = registry.get("record_service")
    try:
        ensure_record_schema(
            service.researcher_store, service.project_store, service.publication_store
        )
    except psycopg2.Error as e:
        logger.error(f"记录存储不可用: {e}")
        print("记录存储不可用，请检查 DATABASE_URL 或运行 collab-cli check")
        return 1
    CollabShell(registry).run()
    return 0


def _run_seed(registry: ServiceRegistry) -> int:
    stats = run_seed(registry)
    print(json.dumps(stats, ensure_ascii=False, indent=2))
    return 0


def _run_resync(registry: ServiceRegistry) -> int:
    stats = registry.get("record_service").resync_graph()
    print(json.dumps(stats, ensure_ascii=False, indent=2))
    return 1 if stats.get("failed") else 0


def _run_check(registry: ServiceRegistry) -> int:
    status = run_check(registry)
    for name, ok in status.items():
        print(f"{name}: {'正常' if ok else '失败'}")
    return 0 if all(status.values()) else 1


COMMANDS = {
    "menu": _run_menu,
    "seed": _run_seed,
    "resync": _run_resync,
    "check": _run_check,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="研究协作记录 CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例:
  # 交互式菜单
  collab-cli

  # 写入示例数据
  collab-cli seed

  # 图谱写入失败后，从记录存储重建图谱
  collab-cli resync
"""
    )
    parser.add_argument(
        "command",
        nargs="?",
        choices=list(COMMANDS),
        default="menu",
        help="menu(交互式菜单), seed(示例数据), resync(重建图谱), check(连接检查)",
    )
    args = parser.parse_args(argv)

    load_dotenv()
    configure_logging(service_name="collab-cli", default_format=LogFormat.CONSOLE)

    registry = register_core_services()
    try:
        return COMMANDS[args.command](registry)
    finally:
        registry.close_all()


if __name__ == "__main__":
    sys.exit(main())
