"""
共享代码包
"""
