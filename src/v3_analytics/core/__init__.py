"""
Core infrastructure: entity storage and chain orchestration.
"""
