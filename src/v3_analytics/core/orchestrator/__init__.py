"""
Multi-chain orchestration for the event pipelines.

Usage:
    from v3_analytics.core.orchestrator import ChainOrchestrator

    orchestrator = ChainOrchestrator.from_config(config, store)
    stats = await orchestrator.run(events)
"""

from .orchestrator import ChainOrchestrator

__all__ = ["ChainOrchestrator"]
