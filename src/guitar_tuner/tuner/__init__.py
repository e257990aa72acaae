"""
Listening loop, controller state machine and observable display values.
"""

from .controller import TunerController, TunerState
from .display import ObservableValue, TunerDisplay
from .pipeline import iter_frames, run_pipeline

__all__ = [
    'TunerController',
    'TunerState',
    'ObservableValue',
    'TunerDisplay',
    'iter_frames',
    'run_pipeline',
]
