"""
Neo4j 图存储层

提供研究员 / 项目 / 论文节点和关系边的合并写入与查询。

写入全部使用 MERGE 语义，重复执行不会产生重复节点或重复边，
因此镜像写入可以随时重放（见 RecordService.resync_graph）。
写入失败只记录日志并返回 False；读取失败直接抛出驱动异常。
"""

import contextlib
import logging
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from neo4j import Driver, GraphDatabase
from neo4j.exceptions import DriverError, Neo4jError

from domains.core.settings import get_store_settings

from .models import Collaboration, GraphEdge, GraphNode, NodeType, RelationType

logger = logging.getLogger(__name__)

# 关系列表的最大返回条数
MAX_COLLABORATIONS = 50


class GraphStore:
    """
    Neo4j 图存储层

    连接句柄由调用方（ServiceRegistry）持有，进程退出前调用 close()。

    配置项（见 StoreSettings）:
        NEO4J_URI: Neo4j 连接地址，默认 bolt://localhost:7687
        NEO4J_USER: 用户名，默认 neo4j
        NEO4J_PASSWORD: 密码
        NEO4J_DATABASE: 数据库名，为空使用服务端默认库
    """

    def __init__(
        self,
        uri: str | None = None,
        user: str | None = None,
        password: str | None = None,
        database: str | None = None,
        driver: Driver | None = None,
    ):
        """初始化 Neo4j 连接配置（驱动懒加载）"""
        settings = get_store_settings()
        self._uri = uri or settings.NEO4J_URI
        self._user = user or settings.NEO4J_USER
        self._password = password or settings.NEO4J_PASSWORD
        self._database = database or settings.NEO4J_DATABASE
        self._driver = driver

        logger.info(f"GraphStore 初始化完成: {self._uri}")

    def _get_driver(self) -> Driver:
        """获取 Neo4j 驱动（懒加载）"""
        if self._driver is None:
            self._driver = GraphDatabase.driver(
                self._uri,
                auth=(self._user, self._password),
                max_connection_lifetime=3600,
                max_connection_pool_size=50,
            )
        return self._driver

    @contextmanager
    def _session(self) -> Generator:
        """获取 Neo4j session 的上下文管理器"""
        session = self._get_driver().session(database=self._database)
        try:
            yield session
        finally:
            with contextlib.suppress(Exception):
                session.close()

    def close(self) -> None:
        """关闭 Neo4j 连接"""
        if self._driver is not None:
            try:
                self._driver.close()
                logger.info("Neo4j 连接已关闭")
            except (Neo4jError, DriverError) as e:
                logger.warning(f"关闭 Neo4j 连接时出错: {e}")
            finally:
                self._driver = None

    def health_check(self) -> bool:
        """
        健康检查

        Returns:
            True 表示连接正常，False 表示连接失败
        """
        try:
            with self._session() as session:
                record = session.run("RETURN 1 AS n").single()
                return record is not None and record["n"] == 1
        except (Neo4jError, DriverError) as e:
            logger.error(f"Neo4j 健康检查失败: {e}")
            return False

    # ==================== 节点操作 ====================

    def merge_node(self, node: GraphNode) -> bool:
        """
        合并节点

        按业务键 MERGE：键值完全一致则复用已有节点，否则新建。

        Args:
            node: GraphNode 对象

        Returns:
            是否写入成功
        """
        key = self._merge_key(node)
        cypher = f"MERGE (n:{node.label} {{{self._pattern(key)}}}) RETURN count(n) AS merged"

        try:
            with self._session() as session:
                record = session.run(cypher, **key).single()
        except (Neo4jError, DriverError) as e:
            logger.error(f"合并节点失败: {node.label} {key}: {e}")
            return False

        merged = record is not None and record["merged"] > 0
        if merged:
            logger.debug(f"合并节点成功: {node.label} {key}")
        return merged

    # ==================== 边操作 ====================

    def merge_edge(self, edge: GraphEdge) -> bool:
        """
        合并边: (研究员 {name})-[relation]->(目标节点)

        研究员按姓名匹配（重名研究员都会连上），目标节点按业务键 MERGE。
        同一对节点之间同类型的边只会存在一条，不同类型的边可以共存。

        Args:
            edge: GraphEdge 对象

        Returns:
            是否创建/复用成功（源研究员不存在时为 False）
        """
        relation = self._get_relation_type(edge.relation)
        key = self._merge_key(edge.target, prefix="t_")

        cypher = f"""
        MATCH (r:{NodeType.RESEARCHER.label} {{name: $source_name}})
        MERGE (t:{edge.target.label} {{{self._pattern(key, prefix="t_")}}})
        MERGE (r)-[rel:{relation}]->(t)
        RETURN count(rel) AS linked
        """

        try:
            with self._session() as session:
                record = session.run(cypher, source_name=edge.source_name, **key).single()
        except (Neo4jError, DriverError) as e:
            logger.error(f"合并边失败: {edge.source_name} -[{relation}]-> {edge.target.label}: {e}")
            return False

        linked = record is not None and record["linked"] > 0
        if linked:
            logger.info(f"合并边成功: {edge.source_name} -[{relation}]-> {edge.target.label} {edge.target.key}")
        else:
            logger.warning(f"研究员节点不存在，跳过建边: {edge.source_name}")
        return linked

    def merge_collaboration(
        self,
        source_name: str,
        relation: RelationType,
        target_name: str,
    ) -> bool:
        """
        合并研究员之间的协作边，两端研究员节点按姓名 MERGE

        Returns:
            是否写入成功
        """
        rel = self._get_relation_type(relation)
        cypher = f"""
        MERGE (r1:{NodeType.RESEARCHER.label} {{name: $source_name}})
        MERGE (r2:{NodeType.RESEARCHER.label} {{name: $target_name}})
        MERGE (r1)-[rel:{rel}]->(r2)
        RETURN count(rel) AS linked
        """

        try:
            with self._session() as session:
                record = session.run(
                    cypher, source_name=source_name, target_name=target_name
                ).single()
        except (Neo4jError, DriverError) as e:
            logger.error(f"合并协作边失败: {source_name} -[{rel}]-> {target_name}: {e}")
            return False

        linked = record is not None and record["linked"] > 0
        if linked:
            logger.info(f"合并协作边成功: {source_name} -[{rel}]-> {target_name}")
        return linked

    # ==================== 查询 ====================

    def get_outgoing(self, researcher_name: str) -> list[Collaboration]:
        """
        获取研究员的所有出边

        Args:
            researcher_name: 研究员姓名

        Returns:
            Collaboration 列表
        """
        cypher = f"""
        MATCH (r:{NodeType.RESEARCHER.label} {{name: $name}})-[rel]->(t)
        RETURN r.name AS researcher,
               type(rel) AS relation,
               coalesce(t.title, t.name) AS target
        ORDER BY relation, target
        """

        with self._session() as session:
            result = session.run(cypher, name=researcher_name)
            return [self._record_to_collaboration(record) for record in result]

    def list_collaborations(self, limit: int = MAX_COLLABORATIONS) -> list[Collaboration]:
        """
        列出所有研究员的出边

        Args:
            limit: 返回条数，上限 MAX_COLLABORATIONS

        Returns:
            Collaboration 列表（不超过 50 条，顺序由图引擎决定）
        """
        limit = max(0, min(limit, MAX_COLLABORATIONS))
        cypher = f"""
        MATCH (r:{NodeType.RESEARCHER.label})-[rel]->(t)
        RETURN r.name AS researcher,
               type(rel) AS relation,
               coalesce(t.title, t.name) AS target
        LIMIT $limit
        """

        with self._session() as session:
            result = session.run(cypher, limit=limit)
            collaborations = [self._record_to_collaboration(record) for record in result]

        return collaborations[:limit]

    def clear(self) -> int:
        """
        清空图谱（删除所有节点和边）

        Returns:
            删除的节点数
        """
        with self._session() as session:
            record = session.run("MATCH (n) DETACH DELETE n RETURN count(n) AS deleted").single()
            deleted = record["deleted"] if record else 0

        logger.info(f"图谱已清空: 删除 {deleted} 个节点")
        return deleted

    # ==================== 辅助方法 ====================

    def _get_relation_type(self, relation: RelationType) -> str:
        """
        获取 Neo4j 关系类型

        只接受 RelationType 枚举，关系类型无法参数化，必须来自封闭集合。
        """
        if not isinstance(relation, RelationType):
            raise TypeError(f"relation 必须是 RelationType: {relation!r}")
        return relation.value

    def _merge_key(self, node: GraphNode, prefix: str = "") -> dict[str, Any]:
        """生成 MERGE 参数，null 值替换为空字符串（MERGE 不接受 null 属性）"""
        return {
            f"{prefix}{k}": ("" if v is None else v)
            for k, v in node.key.items()
        }

    def _pattern(self, key: dict[str, Any], prefix: str = "") -> str:
        """生成属性匹配片段，如 "title: $t_title, year: $t_year" """
        return ", ".join(f"{k[len(prefix):]}: ${k}" for k in key)

    def _record_to_collaboration(self, record) -> Collaboration:
        """将查询记录转换为 Collaboration"""
        return Collaboration(
            researcher=record["researcher"],
            relation=record["relation"],
            target=record["target"],
        )
