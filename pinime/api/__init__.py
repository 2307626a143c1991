"""pinime HTTP 接口"""
