from .analyzer import DataProcessor, DecisionAnalyzer
from .visualizer import DecisionVisualizer

__all__ = [
    'DataProcessor',
    'DecisionAnalyzer',
    'DecisionVisualizer'
]
