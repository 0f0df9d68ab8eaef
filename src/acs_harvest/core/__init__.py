# ABOUTME: Business logic and orchestration layer
# ABOUTME: Record assembly, concurrent harvesting, reconciliation and dataset ordering

"""
Core Layer: harvesting workflow

This layer handles:
- Assembling canonical records from raw layout extractions
- Bounded-concurrency harvesting with retry and backoff
- Reconciling the discovery feed against an existing dataset
- Numeric-aware dataset ordering

Data Flow: extraction/ raw classifications -> canonical records -> persistence/
"""

from .sorting import SortField, sort_key, sort_records

# Import services on-demand to avoid circular imports
# Use: from acs_harvest.core.scheduler import HarvestScheduler

__all__ = [
    "SortField",
    "sort_key",
    "sort_records",
]
