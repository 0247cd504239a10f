"""Store backend implementations"""
