"""
Profile Hub - 研究员画像

汇总研究员的论文、项目和协作关系，并在 Redis 中缓存。
"""
