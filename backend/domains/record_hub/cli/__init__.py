"""
命令行入口

交互式编号菜单，以及 seed / resync / check 维护子命令。
入口函数: domains.record_hub.cli.main:main
"""
