"""
Surface Sweeper AI agents module.

Provides various agents for playing on cube and sphere boards:
- RandomAgent: Baseline random selection
- LogicAgent: Constraint-based logical deduction over the neighbor graph
- DQNAgent: Deep Q-Network with graph convolutions (PyTorch/CUDA)
"""
from .base_agent import BaseAgent
from .random_agent import RandomAgent
from .logic_agent import LogicAgent
from .dqn_agent import DQNAgent, GraphQNetwork, TransitionMemory, get_device

__all__ = [
    "BaseAgent",
    "RandomAgent",
    "LogicAgent",
    "DQNAgent",
    "GraphQNetwork",
    "TransitionMemory",
    "get_device",
]
