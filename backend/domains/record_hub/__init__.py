"""
Record Hub - 研究记录管理

提供研究员、项目、论文的录入和查询，
录入时同步镜像到图谱并失效相关研究员的画像缓存。
"""
