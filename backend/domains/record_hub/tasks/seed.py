"""
示例数据写入

清空图谱后，经由 RecordService 写入三名研究员、两个项目及其关系，
记录存储、图谱、画像缓存同时收到数据。
"""

import logging
from typing import Dict, Optional

from domains.core.lifecycle import ServiceRegistry, register_core_services
from domains.graph_hub.core import RelationType

from ..core import ParticipantSpec, ensure_record_schema

logger = logging.getLogger(__name__)

SAMPLE_RESEARCHERS = [
    {"name": "Ayat Sider", "department": "Computer Science", "interests": ["AI", "Web"]},
    {"name": "Omar Khalil", "department": "Physics", "interests": ["Quantum", "Optics"]},
    {"name": "Lina Fares", "department": "Biology", "interests": ["Genetics", "Microbiology"]},
]

# (标题, 描述, 参与者姓名)
SAMPLE_PROJECTS = [
    ("AI Web Project", "Research on AI-powered web apps", "Ayat Sider"),
    ("Quantum Optics Study", "Study of photons in quantum optics", "Omar Khalil"),
]

# (源研究员, 关系, 目标研究员)
SAMPLE_COLLABORATIONS = [
    ("Ayat Sider", RelationType.COLLABORATES_WITH, "Lina Fares"),
]


def run_seed(registry: Optional[ServiceRegistry] = None) -> Dict[str, int]:
    """
    写入示例数据

    只清空图谱，记录存储是追加写入，重复执行会产生重复记录。

    Returns:
        {"cleared": 删除的节点数, "researchers": X, "projects": Y, "collaborations": Z}
    """
    registry = register_core_services(registry)
    service = registry.get("record_service")
    graph_store = registry.get("graph_store")

    ensure_record_schema(
        service.researcher_store, service.project_store, service.publication_store
    )

    stats = {"cleared": graph_store.clear(), "researchers": 0, "projects": 0, "collaborations": 0}

    ids_by_name = {}
    for data in SAMPLE_RESEARCHERS:
        researcher = service.create_researcher(**data)
        ids_by_name[researcher.name] = researcher.id
        stats["researchers"] += 1

    for title, description, member in SAMPLE_PROJECTS:
        service.create_project(
            title=title,
            description=description,
            participants=[ParticipantSpec(ids_by_name[member], RelationType.WORKS_ON.value)],
        )
        stats["projects"] += 1

    for source, relation, target in SAMPLE_COLLABORATIONS:
        if graph_store.merge_collaboration(source, relation, target):
            stats["collaborations"] += 1

    logger.info(f"示例数据写入完成: {stats}")
    return stats
