"""
Pipeline module: asynchronous data transformation with stage-tagged errors.
"""

from fpcore.pipeline import aggregates, transforms
from fpcore.pipeline.pipeline import DataPipeline, Group, PipelineStats

__all__ = [
    "DataPipeline",
    "Group",
    "PipelineStats",
    "aggregates",
    "transforms",
]
